import logging

import numpy as np
import pandas as pd
import pytest

from landscape_model import InvalidGridConfiguration, InvalidSampleSize, rank_position_grids
from landscape_sampling import generate_landscapes, sample_landscape

NICHES = [
    (1.0, (0.3, 0.3), [[0.02, 0.0], [0.0, 0.02]]),
    (1.0, (0.7, 0.7), [[0.02, 0.0], [0.0, 0.02]]),
]
INTERACTIONS = np.array([[0.0, -0.5], [-0.5, 0.0]])


def test_example_scenario_single_landscape():
    landscapes = generate_landscapes(50, 1, NICHES, INTERACTIONS, seed=0)
    assert len(landscapes) == 1
    landscape = landscapes[0]
    assert list(landscape.columns) == ["probability", "s1", "s2", "e1", "e2"]
    assert len(landscape) == 50
    assert not landscape.isna().any().any()


def test_landscape_set_sizes_and_ranges():
    landscapes = generate_landscapes(30, 5, NICHES, INTERACTIONS, seed=1)
    assert len(landscapes) == 5
    for landscape in landscapes:
        assert len(landscape) == 30
        assert landscape["probability"].between(0, 1).all()
        assert ((landscape["e1"] > 0) & (landscape["e1"] <= 1)).all()
        assert ((landscape["e2"] > 0) & (landscape["e2"] <= 1)).all()
        assert (landscape[["s1", "s2"]] >= 0).all().all()
        assert landscape.attrs["sigma"] > 0
        assert 1 <= landscape.attrs["n_modes"] <= 4


def test_zero_probability_cells_are_never_drawn():
    landscapes = generate_landscapes(200, 10, NICHES, INTERACTIONS, seed=2)
    for landscape in landscapes:
        assert (landscape["probability"] > 0).all()


def test_same_seed_gives_identical_landscapes():
    first = generate_landscapes(40, 3, NICHES, INTERACTIONS, seed=123)
    second = generate_landscapes(40, 3, NICHES, INTERACTIONS, seed=123)
    for a, b in zip(first, second):
        pd.testing.assert_frame_equal(a, b)
        assert a.attrs == b.attrs


def test_different_seeds_give_different_landscapes():
    first = generate_landscapes(40, 1, NICHES, INTERACTIONS, seed=1)[0]
    second = generate_landscapes(40, 1, NICHES, INTERACTIONS, seed=2)[0]
    assert not first.equals(second)


def test_landscape_larger_than_grid_repeats_patches(caplog):
    with caplog.at_level(logging.WARNING):
        landscape = generate_landscapes(500, 1, NICHES, INTERACTIONS, seed=3)[0]
    assert len(landscape) == 500
    assert landscape.duplicated(["e1", "e2"]).any()
    assert "exceeds" in caplog.text


@pytest.mark.parametrize("lsize, gensize", [(0, 1), (10, 0), (-5, 2), (10, 1.5)])
def test_invalid_sample_sizes(lsize, gensize):
    with pytest.raises(InvalidSampleSize):
        generate_landscapes(lsize, gensize, NICHES, INTERACTIONS, seed=0)


@pytest.mark.parametrize("grid_args", [
    {"n_coords": 50},
    {"n_coords": 1},
    {"mins": (0.5, 0.0), "maxs": (0.5, 1.0)},
])
def test_invalid_grid(grid_args):
    with pytest.raises(InvalidGridConfiguration):
        generate_landscapes(10, 1, NICHES, INTERACTIONS, seed=0, **grid_args)


@pytest.mark.parametrize("seed", range(10))
def test_landscapes_on_grid_away_from_unit_square(seed):
    landscapes = generate_landscapes(5, 3, NICHES, INTERACTIONS, mins=(10, 10), maxs=(20, 20), seed=seed)
    assert len(landscapes) == 3
    for landscape in landscapes:
        assert len(landscape) == 5
        assert landscape["probability"].between(0, 1).all()
        assert ((landscape["e1"] > 0) & (landscape["e1"] <= 1)).all()


def test_service_values_match_sampled_cells():
    surface = np.array([[0.0, 0.0], [0.0, 1.0]])
    s1 = np.array([[1.0, 2.0], [3.0, 4.0]])
    s2 = s1 * 10
    rx, ry = rank_position_grids(surface.shape)

    landscape = sample_landscape(surface, [s1, s2], rx, ry, 25, np.random.default_rng(0))

    assert len(landscape) == 25
    assert (landscape["probability"] == 1).all()
    assert (landscape["s1"] == 4).all()
    assert (landscape["s2"] == 40).all()
    assert (landscape["e1"] == 1).all()
    assert (landscape["e2"] == 1).all()


def test_sampling_follows_weights():
    surface = np.array([[0.25, 0.75]])
    values = np.array([[0.0, 1.0]])
    rx, ry = rank_position_grids(surface.shape)
    landscape = sample_landscape(surface, [values], rx, ry, 20000, np.random.default_rng(5))
    assert landscape["s1"].mean() == pytest.approx(0.75, abs=0.02)
