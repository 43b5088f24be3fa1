# This script answers the question:
# How does the overlap between two service niches change the total amount of
# each service, and their covariation, across randomly generated landscapes?

import logging
import multiprocessing

import numpy as np
import pandas as pd
from tqdm import tqdm

from config import CONFIG, INTERACTIONS, OVERLAP_SHIFTS, RANDOM_SEED, SERVICE_1
from landscape_model import build_environmental_grid
from landscape_sampling import generate_landscapes, service_columns
from niche_model import as_niche, evaluate_fundamental_niche, niche_overlap

logger = logging.getLogger(__name__)


def landscape_totals(landscape):
    """Sums each service over the patches of one landscape."""
    columns = [c for c in landscape.columns if c.startswith("s") and c[1:].isdigit()]
    return {f"total_{c}": float(landscape[c].sum()) for c in columns}


def overlap_scenarios(base_niche, shifts, interactions, config=CONFIG):
    """
    Builds two-service scenarios with decreasing niche overlap.

    Service 2 shares service 1's peak and covariance, with its optimum moved
    diagonally away from service 1's by each shift, kept inside the grid limits.
    """
    base_niche = as_niche(base_niche)
    grid = build_environmental_grid(config['GRID_MINS'], config['GRID_MAXS'], config['N_COORDS'])
    base_values = evaluate_fundamental_niche(grid.coords, base_niche)

    scenarios = []
    for shift in shifts:
        optimum = np.clip(base_niche.optimum + shift, config['GRID_MINS'], config['GRID_MAXS'])
        shifted = (base_niche.peak, optimum, base_niche.covariance)
        overlap = niche_overlap(base_values, evaluate_fundamental_niche(grid.coords, shifted))
        scenarios.append({
            'name': f"shift_{shift:.2f}",
            'niches': [base_niche, as_niche(shifted)],
            'interactions': np.asarray(interactions, dtype=float),
            'overlap': overlap,
        })
    return scenarios


def process_one_landscape(config, scenario, seed):
    """ Generates a single landscape with its own seed and returns its service totals."""
    rng = np.random.default_rng(seed)
    landscape = generate_landscapes(
        config['LANDSCAPE_SIZE'], 1, scenario['niches'], scenario['interactions'],
        mins=config['GRID_MINS'], maxs=config['GRID_MAXS'], n_coords=config['N_COORDS'], rng=rng
    )[0]
    return landscape_totals(landscape)


def run_monte_carlo(config, scenarios, seed=None):
    """
    Runs the Monte Carlo experiment for every scenario.

    Every replicate gets an independent child seed, so the results are the same
    whether the replicates run serially or in a process pool.
    """
    num_landscapes = config['NUM_LANDSCAPES']
    n_processes = config.get('N_PROCESSES', 1)
    if num_landscapes <= 0:
        raise ValueError(f"NUM_LANDSCAPES must be positive, got {num_landscapes}.")

    children = np.random.SeedSequence(seed).spawn(len(scenarios) * num_landscapes)

    records = []
    for s, scenario in enumerate(tqdm(scenarios, desc="Analyzing overlap scenarios")):
        logger.info(f"Scenario {scenario['name']} (overlap {scenario['overlap']:.3f}): "
                    f"{num_landscapes} landscapes")
        seeds = children[s * num_landscapes:(s + 1) * num_landscapes]
        task_args = [(config, scenario, child) for child in seeds]

        if n_processes > 1:
            with multiprocessing.Pool(processes=n_processes) as pool:
                results = pool.starmap(process_one_landscape, task_args)
        else:
            results = [process_one_landscape(*args) for args in task_args]

        for replicate, totals in enumerate(results):
            records.append({'scenario': scenario['name'], 'overlap': scenario['overlap'],
                            'replicate': replicate, **totals})

    return pd.DataFrame(records)


def summarize_experiment(results):
    """Per-scenario mean and standard deviation of each service total, and their correlation."""
    total_columns = [c for c in results.columns if c.startswith("total_")]
    grouped = results.groupby(['scenario', 'overlap'], sort=False)

    summary = grouped[total_columns].agg(['mean', 'std'])
    summary.columns = [f"{column}_{stat}" for column, stat in summary.columns]

    if len(total_columns) >= 2:
        a, b = total_columns[:2]
        summary['correlation'] = [group[a].corr(group[b]) for _, group in grouped]

    return summary.reset_index()


if __name__ == "__main__":
    import matplotlib.pyplot as plt
    from figures import plot_experiment_results

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    scenarios = overlap_scenarios(SERVICE_1, OVERLAP_SHIFTS, INTERACTIONS)

    # --- 1. Run all simulations first to gather data ---
    print("Step 1: Running all simulations to gather data...")
    results = run_monte_carlo(CONFIG, scenarios, seed=RANDOM_SEED)

    # --- 2. Summarize ---
    print("Step 2: Summarizing...")
    print(summarize_experiment(results).to_string(index=False))

    # --- 3. Plot ---
    print("Step 3: Generating plots...")
    plot_experiment_results(results, service_columns(2))
    plt.show()
