import logging

import numpy as np
import pandas as pd

from config import GRID_MAXS, GRID_MINS, N_COORDS
from landscape_model import (InvalidSampleSize, build_environmental_grid, generate_probability_surface,
                             rank_position_grids)
from niche_model import evaluate_realized_niche

logger = logging.getLogger(__name__)


def service_columns(n_services):
    return [f"s{i + 1}" for i in range(n_services)]


def check_sample_size(name, value):
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise InvalidSampleSize(f"{name} must be a positive integer, got {value!r}.")


def sample_landscape(surface, service_grids, rx, ry, lsize, rng):
    """
    Draws one landscape of patches from a probability surface.

    Cells are drawn independently and with replacement, with probability
    proportional to the surface value, so a cell can appear more than once.

    Args:
        surface (numpy.ndarray): Normalized probability surface in grid shape.
        service_grids (list[numpy.ndarray]): Realized service values, one grid per service.
        rx (numpy.ndarray): Row rank positions, reported as e1.
        ry (numpy.ndarray): Column rank positions, reported as e2.
        lsize (int): Number of patches.
        rng (numpy.random.Generator): Random source.

    Returns:
        pandas.DataFrame: lsize rows in draw order, columns probability, s1..sN, e1, e2.
    """
    check_sample_size("lsize", lsize)

    # Flatten everything in the same (row-major) order
    weights = np.asarray(surface, dtype=float).ravel()
    if np.any(weights < 0) or weights.sum() <= 0:
        raise ValueError("Sampling weights must be non-negative with a positive total.")

    idx = rng.choice(weights.size, size=lsize, replace=True, p=weights / weights.sum())

    patches = {"probability": weights[idx]}
    for column, values in zip(service_columns(len(service_grids)), service_grids):
        patches[column] = np.asarray(values, dtype=float).ravel()[idx]
    patches["e1"] = np.asarray(rx).ravel()[idx]
    patches["e2"] = np.asarray(ry).ravel()[idx]

    return pd.DataFrame(patches)


def generate_landscapes(lsize, gensize, niches, interactions, mins=GRID_MINS, maxs=GRID_MAXS,
                        n_coords=N_COORDS, rng=None, seed=None, n_modes=None):
    """
    Generates a set of independent virtual landscapes.

    The grid and the realized niche of every service are computed once and shared
    by all replicates. Each replicate gets a fresh probability surface and a fresh
    sample of patches.

    Args:
        lsize (int): Patches per landscape.
        gensize (int): Number of landscapes.
        niches (list): Niche specification of each service.
        interactions (numpy.ndarray): Service interaction matrix.
        mins, maxs (tuple): Environmental grid limits.
        n_coords (int): Number of grid points, a perfect square.
        rng (numpy.random.Generator, optional): Random source. Built from seed when None.
        seed (int, optional): Seed used when no rng is given.
        n_modes (int, optional): Fixed number of kernels per surface.

    Returns:
        list[pandas.DataFrame]: gensize landscapes. Each records the last kernel sigma
        and the number of kernels of its surface in DataFrame.attrs.
    """
    check_sample_size("lsize", lsize)
    check_sample_size("gensize", gensize)
    grid = build_environmental_grid(mins, maxs, n_coords)

    if lsize > grid.n_cells:
        logger.warning(f"Landscape size {lsize} exceeds the {grid.n_cells} grid cells, "
                       f"patches will repeat")

    if rng is None:
        rng = np.random.default_rng(seed)

    realized = evaluate_realized_niche(grid.coords, niches, interactions)
    service_grids = [grid.reshape(values) for values in realized]
    rx, ry = rank_position_grids(grid.shape)

    landscapes = []
    for _ in range(gensize):
        surface, sigma, modes = generate_probability_surface(grid, rng, n_modes=n_modes)
        landscape = sample_landscape(surface, service_grids, rx, ry, lsize, rng)
        landscape.attrs["sigma"] = sigma
        landscape.attrs["n_modes"] = modes
        landscapes.append(landscape)

    logger.debug(f"Generated {gensize} landscape(s) of {lsize} patches")
    return landscapes
