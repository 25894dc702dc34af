# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import numpy as np
import pytest

from recsplit.splitters import GivenNSplitter, GivenRatioSplitter


def test_given_n_splitter(data_m_small, assert_partition):
    # Users with 4, 5, 7 and 1 ratings
    train, test = GivenNSplitter(4, seed=42).split(data_m_small)

    assert_partition(data_m_small, (train, test))

    np.testing.assert_array_equal(train.user_counts, [4, 4, 4, 1])
    np.testing.assert_array_equal(test.user_counts, [0, 1, 3, 0])


def test_given_n_boundary(data_m_small):
    # A user with exactly num_given ratings keeps all of them.
    train, test = GivenNSplitter(5, seed=42).split(data_m_small)

    np.testing.assert_array_equal(train.user_counts, [4, 5, 5, 1])
    np.testing.assert_array_equal(test.user_counts, [0, 0, 2, 0])


def test_given_n_more_than_all(data_m_small):
    train, test = GivenNSplitter(100, seed=42).split(data_m_small)

    assert train.num_ratings == data_m_small.num_ratings
    assert test.num_ratings == 0
    assert test.shape == data_m_small.shape


@pytest.mark.parametrize("num_given", [1, 3, 10])
def test_given_n_splitter_random(data_m, assert_partition, num_given):
    train, test = GivenNSplitter(num_given, seed=42).split(data_m)

    assert_partition(data_m, (train, test))
    np.testing.assert_array_equal(train.user_counts, np.minimum(data_m.user_counts, num_given))


def test_given_n_seed(data_m):
    tr1, _ = GivenNSplitter(3, seed=5).split(data_m)
    tr2, _ = GivenNSplitter(3, seed=5).split(data_m)

    assert list(tr1) == list(tr2)


@pytest.mark.parametrize("num_given", [0, -1, 2.5, True])
def test_given_n_invalid(num_given):
    with pytest.raises(ValueError):
        GivenNSplitter(num_given)


def test_given_ratio_splitter(data_m_small, assert_partition):
    train, test = GivenRatioSplitter(0.5, seed=42).split(data_m_small)

    assert_partition(data_m_small, (train, test))

    # floor(0.5 * n) for n = 4, 5, 7 and 1
    np.testing.assert_array_equal(train.user_counts, [2, 2, 3, 0])
    np.testing.assert_array_equal(test.user_counts, [2, 3, 4, 1])


@pytest.mark.parametrize("ratio", [0.2, 0.5, 0.8])
def test_given_ratio_splitter_random(data_m, assert_partition, ratio):
    train, test = GivenRatioSplitter(ratio, seed=42).split(data_m)

    assert_partition(data_m, (train, test))
    np.testing.assert_array_equal(train.user_counts, np.floor(data_m.user_counts * ratio).astype(int))


@pytest.mark.parametrize("ratio", [0, 1, 1.5])
def test_given_ratio_invalid(ratio):
    with pytest.raises(ValueError):
        GivenRatioSplitter(ratio)
