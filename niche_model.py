import logging

import numpy as np
from scipy.stats import multivariate_normal

logger = logging.getLogger(__name__)


class NicheSpecification:
    """Peak value, optimum and covariance describing one service's response surface."""

    def __init__(self, peak, optimum, covariance):
        optimum = np.asarray(optimum, dtype=float)
        covariance = np.asarray(covariance, dtype=float)

        if peak <= 0:
            raise ValueError(f"Niche peak must be positive, got {peak}.")
        if optimum.shape != (2,):
            raise ValueError(f"Niche optimum must have 2 values, got shape {optimum.shape}.")
        if covariance.shape != (2, 2):
            raise ValueError(f"Niche covariance must be 2x2, got shape {covariance.shape}.")
        if not np.allclose(covariance, covariance.T):
            raise ValueError("Niche covariance must be symmetric.")
        if np.any(np.linalg.eigvalsh(covariance) <= 0):
            raise ValueError("Niche covariance must be positive definite.")

        optimum.setflags(write=False)
        covariance.setflags(write=False)
        self.peak = float(peak)
        self.optimum = optimum
        self.covariance = covariance

    def __repr__(self):
        return (f"NicheSpecification(peak={self.peak}, optimum={self.optimum.tolist()}, "
                f"covariance={self.covariance.tolist()})")


def as_niche(niche):
    """Accepts a NicheSpecification or a (peak, optimum, covariance) triple."""
    if isinstance(niche, NicheSpecification):
        return niche
    peak, optimum, covariance = niche
    return NicheSpecification(peak, optimum, covariance)


def evaluate_fundamental_niche(coords, niche):
    """
    Evaluates a service's fundamental niche at each coordinate pair.

    The response is a bivariate Gaussian bump scaled so that it equals the
    niche peak at the optimum.

    Args:
        coords (numpy.ndarray): (N, 2) array of (e1, e2) values.
        niche (NicheSpecification or tuple): The service's niche parameters.

    Returns:
        numpy.ndarray: (N,) array of responses, aligned with coords.
    """
    niche = as_niche(niche)
    coords = np.atleast_2d(np.asarray(coords, dtype=float))

    density = multivariate_normal(mean=niche.optimum, cov=niche.covariance)
    # Rescale the log-density so the optimum maps to exactly 1
    log_response = density.logpdf(coords) - density.logpdf(niche.optimum)

    return niche.peak * np.exp(np.atleast_1d(log_response))


def evaluate_realized_niche(coords, niches, interactions):
    """
    Evaluates the realized niche of every service, accounting for pairwise interactions.

    Each service's fundamental response f_i is modified by the other services present
    at the same coordinates: r_i = max(0, f_i * (1 + sum_{j != i} A[i, j] * f_j)).
    Negative coefficients are competition, positive ones facilitation.

    Args:
        coords (numpy.ndarray): (N, 2) array of (e1, e2) values.
        niches (list): One niche specification per service.
        interactions (numpy.ndarray): (S, S) interaction matrix, the diagonal is ignored.

    Returns:
        numpy.ndarray: (S, N) array of realized responses.
    """
    niches = [as_niche(n) for n in niches]
    interactions = np.asarray(interactions, dtype=float)
    n_services = len(niches)

    if n_services == 0:
        raise ValueError("At least one niche is required.")
    if interactions.shape != (n_services, n_services):
        raise ValueError(f"Interaction matrix must be {n_services}x{n_services}, "
                         f"got shape {interactions.shape}.")

    fundamental = np.vstack([evaluate_fundamental_niche(coords, n) for n in niches])

    off_diagonal = interactions - np.diag(np.diag(interactions))
    modifier = 1 + off_diagonal @ fundamental

    return np.maximum(0, fundamental * modifier)


def niche_overlap(values_a, values_b):
    """Continuous Jaccard overlap of two non-negative response surfaces."""
    values_a = np.asarray(values_a, dtype=float)
    values_b = np.asarray(values_b, dtype=float)
    if values_a.shape != values_b.shape:
        raise ValueError(f"Surfaces must have the same shape. Found {values_a.shape} and {values_b.shape}")

    union = np.sum(np.maximum(values_a, values_b))
    if union == 0:
        return np.nan
    return np.sum(np.minimum(values_a, values_b)) / union
