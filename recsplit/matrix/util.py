# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

from typing import Any, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix

from recsplit.matrix.rating_matrix import RatingMatrix

# Conversion and validation of the various matrix data types supported by recsplit.

# The Matrix type is the union of the RatingMatrix object and csr_matrix,
# so splitters can be used without constructing a RatingMatrix first.
Matrix = Union[RatingMatrix, csr_matrix]

# A timestamp lookup maps every rated (user, item) pair onto its timestamp.
Timestamps = Union[pd.Series, Mapping[Tuple[int, int], int], csr_matrix]

_supported_types = Matrix.__args__  # type: ignore


def to_rating_matrix(X: Matrix) -> RatingMatrix:
    """Convert a matrix-like object to a RatingMatrix.

    :param X: Matrix-like object to convert.
    :type X: Matrix
    :raises: UnsupportedTypeError
    :return: Ratings as RatingMatrix.
    :rtype: RatingMatrix
    """
    if isinstance(X, RatingMatrix):
        return X
    if isinstance(X, csr_matrix):
        return RatingMatrix.from_csr_matrix(X)
    raise UnsupportedTypeError(X)


def to_csr_matrix(X: Union[Matrix, Tuple[Matrix, ...]]) -> Union[csr_matrix, Tuple[csr_matrix, ...]]:
    """Convert a matrix-like object to a scipy csr_matrix.

    :param X: Matrix-like object or tuple of objects to convert.
    :type X: Union[Matrix, Tuple[Matrix, ...]]
    :raises: UnsupportedTypeError
    :return: Matrices as csr_matrix.
    :rtype: Union[csr_matrix, Tuple[csr_matrix, ...]]
    """
    if isinstance(X, (tuple, list)):
        return type(X)(to_csr_matrix(x) for x in X)
    if isinstance(X, csr_matrix):
        return X
    elif isinstance(X, RatingMatrix):
        return X.values
    else:
        raise UnsupportedTypeError(X)


def lookup_timestamps(data: RatingMatrix, timestamps: Optional[Timestamps] = None) -> np.ndarray:
    """Timestamps of all ratings in ``data``, aligned with its row-major order.

    :param data: The ratings to look up timestamps for.
    :type data: RatingMatrix
    :param timestamps: Lookup from (user, item) to timestamp.
        Either a pandas Series with a (user, item) MultiIndex,
        a mapping with (user, item) tuples as keys, or a csr_matrix of timestamps.
        A csr_matrix can not store a timestamp of 0,
        so a rating with timestamp 0 in a csr_matrix lookup counts as missing.
        If None, the timestamps stored in ``data`` are used.
    :type timestamps: Timestamps, optional
    :raises ValueError: If no lookup is given and ``data`` has no timestamps.
    :raises KeyError: If a rated (user, item) pair has no timestamp.
    :raises UnsupportedTypeError: If the lookup is of an unsupported type.
    :return: Array of timestamps, one per rating.
    :rtype: np.ndarray
    """
    if timestamps is None:
        if not data.has_timestamps:
            raise ValueError("No timestamps given, and the RatingMatrix has no timestamps.")
        return data.timestamps.values

    users, items = data.indices

    if isinstance(timestamps, pd.Series):
        pairs = pd.MultiIndex.from_arrays([users, items])
        unique_ts = timestamps[~timestamps.index.duplicated(keep="last")]
        values = unique_ts.reindex(pairs)
        missing = values.isna().values
        if missing.any():
            raise KeyError(f"No timestamps for ratings {list(pairs[missing][:5])}")
        return values.values

    if isinstance(timestamps, csr_matrix):
        ts_m = timestamps.tocsr().copy()
        ts_m.sort_indices()
        if ts_m.shape != data.shape:
            raise ValueError(f"Timestamp matrix of shape {ts_m.shape} does not match {data.shape}.")
        pattern = ts_m.astype(bool)
        # csr fancy indexing returns a dense matrix of shape (1, n)
        found = np.asarray(pattern[users, items]).ravel()
        if not found.all():
            missing = list(zip(users[~found], items[~found]))
            raise KeyError(f"No timestamps for ratings {missing[:5]}")
        return np.asarray(ts_m[users, items]).ravel()

    if isinstance(timestamps, Mapping):
        return np.array([timestamps[(int(u), int(i))] for u, i in zip(users, items)])

    raise UnsupportedTypeError(timestamps)


class UnsupportedTypeError(Exception):
    """Raised when a matrix or timestamp lookup of a type not supported by recsplit is received.

    :param X: The object received
    :type X: Any
    """

    def __init__(self, X: Any):
        super().__init__(
            "Recsplit only supports matrix types {}. Received {}.".format(
                ", ".join(t.__name__ for t in _supported_types), type(X).__name__
            )
        )
