# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging
from typing import Dict, Hashable, Iterable, Optional

import numpy as np
from scipy.sparse import csr_matrix

logger = logging.getLogger("recsplit")


def df_to_sparse(df, item_ix, user_ix, value_ix=None, shape=None):
    if value_ix is not None and value_ix in df:
        values = df[value_ix].values
    else:
        if value_ix is not None:
            # value_ix provided, but not in df
            logger.warning(f"Value column {value_ix} not found in dataframe. Using ones instead.")

        values = np.ones(df.shape[0])

    indices = df[user_ix].values, df[item_ix].values

    if shape is None:
        shape = df[user_ix].max() + 1, df[item_ix].max() + 1
    sparse_matrix = csr_matrix((values, indices), shape=shape, dtype=values.dtype)

    return sparse_matrix


def check_fraction(name: str, value: float) -> None:
    """Raise a ValueError if ``value`` is not strictly between 0 and 1.

    :param name: Name of the parameter, used in the error message.
    :type name: str
    :param value: The value to check.
    :type value: float
    :raises ValueError: If ``value`` is outside of the open interval ]0, 1[.
    """
    if isinstance(value, bool) or not 0 < value < 1:
        raise ValueError(f"{name} should be in ]0, 1[, got {value}.")


def sample_positions(rstate: np.random.RandomState, num_samples: int, population: int) -> np.ndarray:
    """Sample ``num_samples`` distinct positions out of ``range(population)``.

    The positions are returned in ascending order,
    so they can be merged in a single pass against an ordered list.

    :param rstate: Random state to draw from.
    :type rstate: np.random.RandomState
    :param num_samples: Number of positions to draw, at most ``population``.
    :type num_samples: int
    :param population: Size of the population to draw from.
    :type population: int
    :return: Sorted array of sampled positions.
    :rtype: np.ndarray
    """
    if num_samples > population:
        raise ValueError(f"Can't sample {num_samples} positions out of {population}.")

    return np.sort(rstate.choice(population, size=num_samples, replace=False))


def rescale_id_space(ids: Iterable[Hashable], id_mapping: Optional[Dict[Hashable, int]] = None) -> Dict[Hashable, int]:
    """Map the given ids to a contiguous range of indices.

    If ``id_mapping`` is given, it is used as a start and only new ids are added.
    """
    id_mapping = dict() if id_mapping is None else dict(id_mapping)

    counter = len(id_mapping)
    for val in ids:
        if val not in id_mapping:
            id_mapping[val] = counter
            counter += 1

    return id_mapping
