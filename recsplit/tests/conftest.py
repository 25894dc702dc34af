# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

from itertools import combinations

import numpy as np
import pandas as pd
import pytest

from recsplit.matrix import RatingMatrix

USER_IX = RatingMatrix.USER_IX
ITEM_IX = RatingMatrix.ITEM_IX
RATING_IX = RatingMatrix.RATING_IX
TIMESTAMP_IX = RatingMatrix.TIMESTAMP_IX

num_users = 50
num_items = 100
num_ratings = 2000

min_t = 0
max_t = 1000


@pytest.fixture(scope="function")
def data_m():
    """Random ratings of 50 users for 100 items, timestamps can be tied."""
    np.random.seed(42)

    input_dict = {
        USER_IX: [np.random.randint(0, num_users) for _ in range(0, num_ratings)],
        ITEM_IX: [np.random.randint(0, num_items) for _ in range(0, num_ratings)],
        RATING_IX: [np.random.randint(1, 6) for _ in range(0, num_ratings)],
        TIMESTAMP_IX: [np.random.randint(min_t, max_t) for _ in range(0, num_ratings)],
    }

    df = pd.DataFrame.from_dict(input_dict)
    df.drop_duplicates([USER_IX, ITEM_IX], inplace=True)

    return RatingMatrix(df, ITEM_IX, USER_IX, rating_ix=RATING_IX, timestamp_ix=TIMESTAMP_IX)


@pytest.fixture(scope="function")
def data_m_small():
    """Ratings of 4 users with 4, 5, 7 and 1 ratings.

    Timestamps are unique and not in row-major order.
    """
    # fmt:off
    input_dict = {
        USER_IX:      [0, 0, 0, 0, 1, 1, 1, 1, 1, 2, 2, 2, 2, 2, 2, 2, 3],
        ITEM_IX:      [0, 1, 2, 3, 0, 1, 2, 3, 4, 0, 1, 2, 3, 4, 5, 6, 6],
        RATING_IX:    [5, 4, 3, 2, 1, 2.5, 3.5, 4.5, 5, 1, 1, 2, 2, 3, 3, 4, 4],
        TIMESTAMP_IX: [17, 3, 9, 1, 12, 5, 16, 2, 8, 4, 15, 6, 11, 14, 7, 13, 10],
    }
    # fmt:on

    df = pd.DataFrame.from_dict(input_dict)
    return RatingMatrix(df, ITEM_IX, USER_IX, rating_ix=RATING_IX, timestamp_ix=TIMESTAMP_IX)


@pytest.fixture(scope="function")
def data_m_ten():
    """10 ratings, with timestamp 100 - 10 * position in row-major order."""
    input_dict = {
        USER_IX: [0, 0, 0, 1, 1, 2, 2, 2, 3, 3],
        ITEM_IX: [0, 2, 4, 1, 3, 0, 1, 4, 2, 3],
        RATING_IX: [1, 2, 3, 4, 5, 1, 2, 3, 4, 5],
        TIMESTAMP_IX: [100, 90, 80, 70, 60, 50, 40, 30, 20, 10],
    }

    df = pd.DataFrame.from_dict(input_dict)
    return RatingMatrix(df, ITEM_IX, USER_IX, rating_ix=RATING_IX, timestamp_ix=TIMESTAMP_IX)


def _entries(m: RatingMatrix):
    return {(u, i): r for u, i, r in m}


def _assert_partition(data: RatingMatrix, partition):
    """Outputs are disjoint, unaltered, and together contain every rating of ``data``."""
    source = _entries(data)
    outputs = [_entries(m) for m in partition]

    assert sum(m.num_ratings for m in partition) == data.num_ratings

    for m in partition:
        assert m.shape == data.shape

    for a, b in combinations(outputs, 2):
        assert not set(a).intersection(b)

    union = {}
    for out in outputs:
        union.update(out)

    assert union == source


@pytest.fixture(scope="function")
def assert_partition():
    return _assert_partition
