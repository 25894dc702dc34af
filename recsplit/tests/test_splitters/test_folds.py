# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import numpy as np
import pandas as pd
import pytest

from recsplit.matrix import RatingMatrix
from recsplit.splitters import FailureReason, KFoldSplitter, Partition, RatioSplitter, build_fold_plan


@pytest.mark.parametrize("num_folds", [1, 2, 5, 10])
def test_fold_sizes(data_m, num_folds):
    plan = build_fold_plan(data_m, num_folds, np.random.RandomState(42))

    assert plan.num_folds == num_folds
    assert plan.fold_sizes.sum() == data_m.num_ratings
    assert plan.fold_sizes.max() - plan.fold_sizes.min() <= 1
    assert set(np.unique(plan.assignments)) == set(range(1, num_folds + 1))


def test_fold_sizes_small(data_m_small):
    # 17 ratings over 5 folds
    plan = build_fold_plan(data_m_small, 5, np.random.RandomState(42))

    assert sorted(plan.fold_sizes) == [3, 3, 3, 4, 4]


def test_fold_plan_matrix(data_m_small):
    plan = build_fold_plan(data_m_small, 3, np.random.RandomState(42))
    folds = plan.as_matrix()

    assert folds.shape == data_m_small.shape
    assert folds.nnz == data_m_small.num_ratings
    users, items = data_m_small.indices
    np.testing.assert_array_equal(np.asarray(folds[users, items]).ravel(), plan.assignments)


def test_fold_plan_read_only(data_m_small):
    plan = build_fold_plan(data_m_small, 3, np.random.RandomState(42))

    with pytest.raises(ValueError):
        plan.assignments[0] = 2


def test_fold_plan_seed(data_m):
    p1 = build_fold_plan(data_m, 5, np.random.RandomState(1))
    p2 = build_fold_plan(data_m, 5, np.random.RandomState(1))

    np.testing.assert_array_equal(p1.assignments, p2.assignments)


def test_fold_plan_clamped():
    df = pd.DataFrame({RatingMatrix.USER_IX: [0, 1, 2], RatingMatrix.ITEM_IX: [0, 0, 1]})
    data = RatingMatrix(df, RatingMatrix.ITEM_IX, RatingMatrix.USER_IX)

    plan = build_fold_plan(data, 10, np.random.RandomState(42))

    assert plan.num_folds == 3
    np.testing.assert_array_equal(plan.fold_sizes, [1, 1, 1])


@pytest.mark.parametrize("num_folds", [0, -3])
def test_fold_plan_invalid_num_folds(data_m_small, num_folds):
    with pytest.raises(ValueError):
        build_fold_plan(data_m_small, num_folds, np.random.RandomState(42))


def test_fold_plan_empty():
    df = pd.DataFrame({RatingMatrix.USER_IX: [], RatingMatrix.ITEM_IX: []}, dtype=int)
    data = RatingMatrix(df, RatingMatrix.ITEM_IX, RatingMatrix.USER_IX, shape=(3, 3))

    with pytest.raises(ValueError):
        build_fold_plan(data, 2, np.random.RandomState(42))


def test_fold(data_m, assert_partition):
    plan = build_fold_plan(data_m, 5, np.random.RandomState(42))

    for k in range(1, 6):
        result = plan.fold(data_m, k)
        assert result.ok

        train, test = result.unwrap()
        assert_partition(data_m, (train, test))
        assert test.num_ratings == plan.fold_sizes[k - 1]


def test_folds_cover_every_rating_once(data_m):
    plan = build_fold_plan(data_m, 4, np.random.RandomState(42))

    seen = []
    for partition in plan.folds(data_m):
        seen.extend((u, i) for u, i, _ in partition.test)

    assert len(seen) == data_m.num_ratings
    assert set(seen) == {(u, i) for u, i, _ in data_m}


@pytest.mark.parametrize("k", [0, 6, -1])
def test_fold_out_of_range(data_m_small, k):
    plan = build_fold_plan(data_m_small, 5, np.random.RandomState(42))
    result = plan.fold(data_m_small, k)

    assert not result
    assert result.failure == FailureReason.FOLD_INDEX_OUT_OF_RANGE


def test_fold_plan_mismatch(data_m_small):
    plan = build_fold_plan(data_m_small, 3, np.random.RandomState(42))
    other = data_m_small.select(np.arange(data_m_small.num_ratings) > 0)

    assert plan.matches(data_m_small)
    assert not plan.matches(other)

    result = plan.fold(other, 1)
    assert result.failure == FailureReason.FOLD_PLAN_MISMATCH


def test_k_fold_splitter(data_m, assert_partition):
    splitter = KFoldSplitter(5, seed=42)
    partitions = splitter.partitions(data_m)

    assert len(partitions) == 5
    for partition in partitions:
        assert_partition(data_m, partition)

    test_sizes = [p.test.num_ratings for p in partitions]
    assert max(test_sizes) - min(test_sizes) <= 1


def test_k_fold_splitter_split(data_m_small, assert_partition):
    splitter = KFoldSplitter(5, seed=42)
    partition = splitter.split(data_m_small)

    assert isinstance(partition, Partition)
    assert_partition(data_m_small, partition)

    # The first fold of the same plan is held out.
    expected = build_fold_plan(data_m_small, 5, np.random.RandomState(42)).fold(data_m_small, 1).unwrap()
    assert list(partition.test) == list(expected.test)


def test_partitions_of_single_split(data_m_small):
    partitions = RatioSplitter(0.5, seed=42).partitions(data_m_small)
    train, _ = RatioSplitter(0.5, seed=42).split(data_m_small)

    assert len(partitions) == 1
    assert list(partitions[0].train) == list(train)


def test_k_fold_splitter_invalid():
    with pytest.raises(ValueError):
        KFoldSplitter(0)
