# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging

from recsplit.matrix import Matrix, to_rating_matrix
from recsplit.splitters.results import Partition
from recsplit.splitters.splitter_base import Splitter

logger = logging.getLogger("recsplit")


class ColdStartSplitter(Splitter):
    """Split users on the number of ratings they have.

    All ratings of users with fewer than ``threshold`` ratings ("cold" users)
    are assigned to test data,
    all ratings of users with at least ``threshold`` ratings to training data.

    A user can only occur in one of both sets.

    :param threshold: Minimal number of ratings of a warm user. Defaults to 5.
    :type threshold: int, optional
    """

    def __init__(self, threshold: int = 5):
        super().__init__()
        if threshold <= 0:
            raise ValueError(f"threshold should be positive, got {threshold}.")
        self.threshold = threshold

    def split(self, data: Matrix) -> Partition:
        """Splits the ratings of warm users from those of cold users.

        :param data: Ratings to split.
        :type data: Matrix
        :return: Partition with the ratings of warm users in ``train``
            and those of cold users in ``test``.
        :rtype: Partition
        """
        data = to_rating_matrix(data)

        users, _ = data.indices
        is_cold = data.user_counts[users] < self.threshold

        logger.debug(f"{self.identifier} - Split successful")

        return Partition(train=data.select(~is_cold), test=data.select(is_cold))
