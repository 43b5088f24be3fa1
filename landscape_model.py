import logging
import math
from functools import reduce

import numpy as np

from config import CENTER_RANGE, GRID_MAXS, GRID_MINS, LOG_SIGMA_RANGE, MODE_RANGE, N_COORDS
from niche_model import NicheSpecification, evaluate_fundamental_niche

logger = logging.getLogger(__name__)


## ------------------------------------------------------ ERRORS -------------------------------------------------------
#region

class LandscapeConfigurationError(ValueError):
    """Raised when a landscape cannot be generated from the given configuration."""


class InvalidGridConfiguration(LandscapeConfigurationError):
    """The number of grid points cannot be reshaped into the environmental grid."""


class InvalidSampleSize(LandscapeConfigurationError):
    """Landscape size or number of landscapes is not a positive integer."""


class DegenerateSurface(LandscapeConfigurationError):
    """The probability surface has zero variance and cannot be normalized."""

#endregion

## ------------------------------------------------- ENVIRONMENTAL GRID ------------------------------------------------
#region

class EnvironmentalGrid:
    """
    Regular square grid over two environmental variables.

    Cell (i, j) holds e1 = axis_e1[i] and e2 = axis_e2[j]. `coords` lists the cells
    in row-major order, the order used whenever a grid is flattened.
    """

    def __init__(self, axis_e1, axis_e2):
        self.axis_e1 = np.asarray(axis_e1, dtype=float)
        self.axis_e2 = np.asarray(axis_e2, dtype=float)
        self.shape = (len(self.axis_e1), len(self.axis_e2))
        self.side = self.shape[0]

        e1, e2 = np.meshgrid(self.axis_e1, self.axis_e2, indexing="ij")
        self.coords = np.column_stack([e1.ravel(), e2.ravel()])
        self.coords.setflags(write=False)

        # Same cells with each axis rescaled to [0, 1], where surface kernels live
        lows, highs = self.coords.min(axis=0), self.coords.max(axis=0)
        self.unit_coords = (self.coords - lows) / (highs - lows)
        self.unit_coords.setflags(write=False)

    @property
    def n_cells(self):
        return self.coords.shape[0]

    def reshape(self, values):
        """Reshapes a flat array aligned with `coords` into grid form."""
        return np.asarray(values).reshape(self.shape)


def build_environmental_grid(mins=GRID_MINS, maxs=GRID_MAXS, n_coords=N_COORDS):
    """
    Builds the environmental grid from axis limits and a total number of points.

    Args:
        mins (tuple): Minimum of e1 and e2.
        maxs (tuple): Maximum of e1 and e2.
        n_coords (int): Total number of grid points, must be a perfect square.

    Returns:
        EnvironmentalGrid: The grid, side x side with side = sqrt(n_coords).
    """
    if isinstance(n_coords, bool) or not isinstance(n_coords, (int, np.integer)) or n_coords < 1:
        raise InvalidGridConfiguration(f"n_coords must be a positive integer, got {n_coords!r}.")

    side = math.isqrt(int(n_coords))
    if side * side != n_coords:
        raise InvalidGridConfiguration(
            f"n_coords must be a perfect square to form a square grid, got {n_coords}.")

    if side < 2:
        raise InvalidGridConfiguration(f"Grid needs at least 2 points per axis, got n_coords={n_coords}.")

    if len(mins) != 2 or len(maxs) != 2:
        raise InvalidGridConfiguration("mins and maxs must each hold two values (e1, e2).")
    if any(lo >= hi for lo, hi in zip(mins, maxs)):
        raise InvalidGridConfiguration(f"Grid minimums {mins} must be below maximums {maxs}.")

    axis_e1 = np.linspace(mins[0], maxs[0], side)
    axis_e2 = np.linspace(mins[1], maxs[1], side)

    logger.debug(f"Built {side}x{side} environmental grid")
    return EnvironmentalGrid(axis_e1, axis_e2)


def rank_position_grids(shape):
    """
    Row and column rank positions as proportions of the grid height.

    rx[i, j] = (i + 1) / height and ry[i, j] = (j + 1) / height. These are what a
    landscape reports as e1 and e2, not the environmental values themselves.
    """
    height, width = shape
    rows, cols = np.indices((height, width))
    rx = (rows + 1) / height
    ry = (cols + 1) / height
    return rx, ry

#endregion

## ------------------------------------------------- PROBABILITY SURFACE -----------------------------------------------
#region

class Kernel:
    """Isotropic bump used as one mode of a probability surface."""

    def __init__(self, center, sigma):
        self.center = tuple(float(c) for c in center)
        self.sigma = float(sigma)

    def as_niche(self):
        # Off-diagonal term is fixed at zero
        covariance = [[self.sigma, 0.0], [0.0, self.sigma]]
        return NicheSpecification(1.0, self.center, covariance)

    def __repr__(self):
        return f"Kernel(center={self.center}, sigma={self.sigma:.4g})"


def draw_kernels(rng, n_modes=None):
    """
    Draws the kernels of one probability surface.

    Args:
        rng (numpy.random.Generator): Random source.
        n_modes (int, optional): Fixed number of kernels. Drawn uniformly from
            MODE_RANGE when None.

    Returns:
        list[Kernel]: The kernels, in draw order.
    """
    if n_modes is None:
        n_modes = int(rng.integers(MODE_RANGE[0], MODE_RANGE[1] + 1))
    elif n_modes < 1:
        raise LandscapeConfigurationError(f"n_modes must be at least 1, got {n_modes}.")

    kernels = []
    for _ in range(n_modes):
        center = rng.uniform(CENTER_RANGE[0], CENTER_RANGE[1], size=2)
        sigma = np.exp(rng.uniform(LOG_SIGMA_RANGE[0], LOG_SIGMA_RANGE[1]))
        kernels.append(Kernel(center, sigma))
    return kernels


def normalize_surface(surface):
    """Min-max rescales a surface to [0, 1]."""
    low, high = np.min(surface), np.max(surface)
    if high == low:
        raise DegenerateSurface(
            f"Probability surface is constant ({low:.4g}) and cannot be normalized.")
    return (surface - low) / (high - low)


def build_probability_surface(grid, kernels):
    """
    Combines kernels into a normalized probability surface.

    Kernels are evaluated on grid positions rescaled to [0, 1], so the surface
    does not depend on the grid limits. Each cell takes the largest response of
    any kernel, then the surface is rescaled so its minimum is 0 and its maximum is 1.

    Args:
        grid (EnvironmentalGrid): Grid the kernels are evaluated on.
        kernels (list[Kernel]): At least one kernel.

    Returns:
        tuple: (surface in grid shape, sigma of the last kernel)
    """
    if not kernels:
        raise LandscapeConfigurationError("At least one kernel is required.")

    evaluations = [evaluate_fundamental_niche(grid.unit_coords, k.as_niche()) for k in kernels]
    combined = reduce(np.maximum, evaluations)

    surface = normalize_surface(grid.reshape(combined))
    return surface, kernels[-1].sigma


def generate_probability_surface(grid, rng, n_modes=None):
    """Draws kernels and builds a fresh probability surface from them."""
    kernels = draw_kernels(rng, n_modes=n_modes)
    surface, sigma = build_probability_surface(grid, kernels)
    logger.debug(f"Probability surface with {len(kernels)} mode(s), last sigma {sigma:.4g}")
    return surface, sigma, len(kernels)

#endregion
