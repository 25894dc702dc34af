# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

"""The matrix module contains the RatingMatrix class to represent ratings within the RecSplit framework.

.. currentmodule:: recsplit.matrix

.. autosummary::
    :toctree: generated/

    RatingMatrix

Example
~~~~~~~~~

A RatingMatrix object can be constructed from a pandas DataFrame
with a row for each rating.
The ``item`` and ``user`` values will be indices in the resulting matrix.
The following example constructs a 4x4 matrix, with 4 ratings::

    import pandas as pd

    from recsplit.matrix import RatingMatrix
    data = {
        "user": [3, 2, 1, 1],
        "item": [1, 1, 2, 3],
        "rating": [4.0, 3.5, 1.0, 5.0],
        "timestamp": [1613736000, 1613736300, 1613736600, 1613736900]
    }
    df = pd.DataFrame.from_dict(data)
    demo_data = RatingMatrix(df, "item", "user", rating_ix="rating", timestamp_ix="timestamp")

"""

from recsplit.matrix.rating_matrix import RatingMatrix
from recsplit.matrix.util import (
    Matrix,
    Timestamps,
    UnsupportedTypeError,
    lookup_timestamps,
    to_csr_matrix,
    to_rating_matrix,
)
