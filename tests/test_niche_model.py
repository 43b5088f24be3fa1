import numpy as np
import pytest

from niche_model import NicheSpecification, evaluate_fundamental_niche, evaluate_realized_niche, niche_overlap

COV = [[0.02, 0.0], [0.0, 0.02]]


def test_fundamental_niche_peaks_at_optimum():
    coords = np.array([[0.3, 0.3], [0.5, 0.5], [0.9, 0.1]])
    values = evaluate_fundamental_niche(coords, (2.0, (0.3, 0.3), COV))
    assert values.shape == (3,)
    assert values[0] == pytest.approx(2.0)
    assert values[0] > values[1] > 0


def test_fundamental_niche_matches_gaussian_formula():
    coords = np.array([[0.4, 0.2]])
    d = np.array([0.1, -0.1])
    expected = np.exp(-0.5 * d @ np.linalg.inv(COV) @ d)
    values = evaluate_fundamental_niche(coords, (1.0, (0.3, 0.3), COV))
    np.testing.assert_allclose(values, [expected])


def test_niche_specification_validation():
    with pytest.raises(ValueError):
        NicheSpecification(0, (0.5, 0.5), COV)
    with pytest.raises(ValueError):
        NicheSpecification(1, (0.5, 0.5, 0.5), COV)
    with pytest.raises(ValueError):
        NicheSpecification(1, (0.5, 0.5), [[1.0, 2.0], [2.0, 1.0]])


def test_realized_niche_without_interactions_equals_fundamental():
    coords = np.random.default_rng(0).uniform(0, 1, size=(20, 2))
    niches = [(1.0, (0.3, 0.3), COV), (1.0, (0.7, 0.7), COV)]
    realized = evaluate_realized_niche(coords, niches, np.zeros((2, 2)))
    assert realized.shape == (2, 20)
    np.testing.assert_allclose(realized[0], evaluate_fundamental_niche(coords, niches[0]))
    np.testing.assert_allclose(realized[1], evaluate_fundamental_niche(coords, niches[1]))


def test_realized_niche_applies_interactions_and_ignores_diagonal():
    coords = np.array([[0.5, 0.5]])
    niches = [(1.0, (0.5, 0.5), COV), (1.0, (0.5, 0.5), COV)]
    interactions = np.array([[5.0, -0.25], [0.5, 5.0]])
    realized = evaluate_realized_niche(coords, niches, interactions)
    np.testing.assert_allclose(realized[:, 0], [0.75, 1.5])


def test_realized_niche_is_never_negative():
    coords = np.array([[0.5, 0.5]])
    niches = [(1.0, (0.5, 0.5), COV), (1.0, (0.5, 0.5), COV)]
    realized = evaluate_realized_niche(coords, niches, np.array([[0.0, -3.0], [0.0, 0.0]]))
    assert realized[0, 0] == 0


def test_realized_niche_rejects_mismatched_interactions():
    niches = [(1.0, (0.3, 0.3), COV), (1.0, (0.7, 0.7), COV)]
    with pytest.raises(ValueError):
        evaluate_realized_niche(np.zeros((1, 2)), niches, np.zeros((3, 3)))


def test_niche_overlap_bounds():
    a = np.array([0.0, 1.0, 0.5])
    assert niche_overlap(a, a) == pytest.approx(1.0)
    assert niche_overlap(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == 0
    assert niche_overlap(a, a / 2) == pytest.approx(0.5)
    assert np.isnan(niche_overlap(np.zeros(3), np.zeros(3)))
