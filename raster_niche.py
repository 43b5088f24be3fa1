import logging
from pathlib import Path

import numpy as np
import rasterio

from niche_model import evaluate_realized_niche

logger = logging.getLogger(__name__)


def read_band(path):
    """Reads band 1 of a raster as float, with nodata replaced by nan."""
    with rasterio.open(path) as src:
        data = src.read(1).astype(float)
        profile = src.profile.copy()
        if src.nodata is not None:
            data[data == src.nodata] = np.nan
    return data, profile


def load_environment_rasters(path_e1, path_e2):
    """
    Loads the two environmental variables from single-band rasters.

    Returns:
        tuple: (e1, e2, profile) where profile is the first raster's profile.
    """
    e1, profile = read_band(path_e1)
    e2, _ = read_band(path_e2)

    if e1.shape != e2.shape:
        raise ValueError(f"Rasters must have the same shape. Found {e1.shape} and {e2.shape}")

    logger.info(f"Loaded environmental rasters {Path(path_e1).name}, {Path(path_e2).name} {e1.shape}")
    return e1, e2, profile


def rescale_to_unit(values):
    """Min-max rescales an array to [0, 1], ignoring nan."""
    values = np.asarray(values, dtype=float)
    if np.all(np.isnan(values)):
        raise ValueError("Raster has no valid pixels.")

    low, high = np.nanmin(values), np.nanmax(values)
    if high == low:
        raise ValueError(f"Raster is constant ({low}) and cannot be rescaled.")
    return (values - low) / (high - low)


def map_realized_niches(e1, e2, niches, interactions):
    """
    Evaluates the realized niche of every service on each pixel.

    Both layers are rescaled to [0, 1] first, the range the niches are defined on.
    Pixels missing either variable are nan in every output band.

    Returns:
        numpy.ndarray: (S, rows, cols) array of service values.
    """
    e1 = rescale_to_unit(e1)
    e2 = rescale_to_unit(e2)

    valid = ~(np.isnan(e1) | np.isnan(e2))
    services = np.full((len(niches),) + e1.shape, np.nan)

    if not valid.any():
        logger.warning("No pixel has both environmental variables, returning an empty map")
        return services

    coords = np.column_stack([e1[valid], e2[valid]])
    services[:, valid] = evaluate_realized_niche(coords, niches, interactions)
    return services


def write_service_rasters(path, services, profile):
    """Writes one band per service to a float32 GeoTIFF."""
    services = np.asarray(services, dtype=np.float32)
    meta = profile.copy()
    meta.update(driver='GTiff', dtype='float32', count=services.shape[0], nodata=np.nan,
                height=services.shape[1], width=services.shape[2], compress='lzw')

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with rasterio.open(path, 'w', **meta) as dst:
        dst.write(services)

    logger.info(f"Wrote {services.shape[0]} service band(s) to {Path(path).name}")
    return path
