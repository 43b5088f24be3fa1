# Reproduces the analysis end to end:
# 1. Niches of two hypothetical ecosystem services over two socio-environmental variables
# 2. Virtual landscapes sampled from random probability surfaces
# 3. Monte Carlo experiment comparing landscapes with different niche overlaps
# 4. The same niches applied to real environmental rasters (optional)

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from config import CONFIG, INTERACTIONS, OUTPUT_DIR, OVERLAP_SHIFTS, RANDOM_SEED, SERVICE_1, SERVICE_2
from figures import (plot_experiment_results, plot_landscape, plot_niche_surfaces, plot_probability_surface,
                     plot_service_maps)
from landscape_model import build_environmental_grid, generate_probability_surface
from landscape_sampling import generate_landscapes, service_columns
from monte_carlos import overlap_scenarios, run_monte_carlo, summarize_experiment
from niche_model import evaluate_fundamental_niche, evaluate_realized_niche, niche_overlap
from raster_niche import load_environment_rasters, map_realized_niches, write_service_rasters

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Paths to two single-band rasters (e1, e2), or None to skip the real-map overlay
RASTER_PATHS = None
SHOW_PLOTS = False


def finish_figure(fig):
    if SHOW_PLOTS:
        plt.show()
    plt.close(fig)


if __name__ == "__main__":
    out_dir = Path(OUTPUT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    niches = [SERVICE_1, SERVICE_2]

    ## ------------------------------------------------ NICHE DEFINITIONS ----------------------------------------------
    #region

    grid = build_environmental_grid(CONFIG['GRID_MINS'], CONFIG['GRID_MAXS'], CONFIG['N_COORDS'])
    fundamental = [evaluate_fundamental_niche(grid.coords, n) for n in niches]
    realized = evaluate_realized_niche(grid.coords, niches, INTERACTIONS)

    logger.info(f"Fundamental niche overlap: {niche_overlap(*fundamental):.3f}")

    fig, _ = plot_niche_surfaces(grid, fundamental, titles=["Service 1 (fundamental)", "Service 2 (fundamental)"],
                                 save_path=out_dir / "fundamental_niches.png")
    finish_figure(fig)
    fig, _ = plot_niche_surfaces(grid, realized, titles=["Service 1 (realized)", "Service 2 (realized)"],
                                 save_path=out_dir / "realized_niches.png")
    finish_figure(fig)

    #endregion

    ## ----------------------------------------------- VIRTUAL LANDSCAPES ----------------------------------------------
    #region

    rng = np.random.default_rng(RANDOM_SEED)
    surface, sigma, n_modes = generate_probability_surface(grid, rng)
    logger.info(f"Example probability surface: {n_modes} mode(s)")
    fig, _ = plot_probability_surface(surface, sigma, save_path=out_dir / "probability_surface.png")
    finish_figure(fig)

    landscapes = generate_landscapes(CONFIG['LANDSCAPE_SIZE'], 3, niches, INTERACTIONS, rng=rng)
    for i, landscape in enumerate(landscapes):
        print(f"Landscape {i + 1}: {landscape.attrs['n_modes']} mode(s), "
              f"s1 = {landscape['s1'].sum():.2f}, s2 = {landscape['s2'].sum():.2f}")
        fig, _ = plot_landscape(landscape, save_path=out_dir / f"landscape_{i + 1}.png")
        finish_figure(fig)

    #endregion

    ## ------------------------------------------------ OVERLAP EXPERIMENT ---------------------------------------------
    #region

    scenarios = overlap_scenarios(SERVICE_1, OVERLAP_SHIFTS, INTERACTIONS)
    results = run_monte_carlo(CONFIG, scenarios, seed=RANDOM_SEED)
    results.to_csv(out_dir / "overlap_experiment.csv", index=False)

    summary = summarize_experiment(results)
    print(summary.to_string(index=False))

    fig, _ = plot_experiment_results(results, service_columns(len(niches)),
                                     save_path=out_dir / "overlap_experiment.png")
    finish_figure(fig)

    #endregion

    ## -------------------------------------------------- REAL RASTERS -------------------------------------------------
    #region

    if RASTER_PATHS is not None:
        e1, e2, profile = load_environment_rasters(*RASTER_PATHS)
        services = map_realized_niches(e1, e2, niches, INTERACTIONS)
        write_service_rasters(out_dir / "service_maps.tif", services, profile)

        fig, _ = plot_service_maps(services, save_path=out_dir / "service_maps.png")
        finish_figure(fig)
    else:
        logger.info("No rasters configured, skipping the real-map overlay")

    #endregion
