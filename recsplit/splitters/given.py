# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging
from abc import abstractmethod

import numpy as np
from tqdm.auto import tqdm

from recsplit.matrix import Matrix, to_rating_matrix
from recsplit.splitters.results import Partition
from recsplit.splitters.splitter_base import RandomSplitter
from recsplit.util import check_fraction, sample_positions

logger = logging.getLogger("recsplit")


class GivenSplitter(RandomSplitter):
    """Base class for splitters that give a number of ratings of every user to the training data.

    For every user, a random subset of their ratings is assigned to training data,
    the remaining ratings to test data.
    Child classes decide how many ratings are given.
    """

    @abstractmethod
    def _num_given(self, num_rated: int) -> int:
        """Number of ratings to give to training data for a user with ``num_rated`` ratings."""
        raise NotImplementedError()

    def split(self, data: Matrix) -> Partition:
        """Splits the ratings of every user into a given part, used for training, and a test part.

        :param data: Ratings to split.
        :type data: Matrix
        :return: Partition with ``train`` and ``test`` ratings.
        :rtype: Partition
        """
        data = to_rating_matrix(data)

        user_counts = data.user_counts
        # Ratings of user u are at positions row_ptr[u]:row_ptr[u + 1].
        row_ptr = np.concatenate([[0], np.cumsum(user_counts)])

        in_train = np.zeros(data.num_ratings, dtype=bool)

        for u in tqdm(np.flatnonzero(user_counts)):
            start, num_rated = row_ptr[u], user_counts[u]
            num_given = self._num_given(num_rated)

            if num_given >= num_rated:
                in_train[start : start + num_rated] = True
            else:
                given = sample_positions(self._rstate, num_given, num_rated)
                in_train[start + given] = True

        logger.debug(f"{self.identifier} - Split successful")

        return Partition(train=data.select(in_train), test=data.select(~in_train))


class GivenNSplitter(GivenSplitter):
    """Keep ``num_given`` random ratings of every user in the training data,
    assign the others to test data.

    Users with at most ``num_given`` ratings have all of their ratings in the training data.

    :param num_given: Number of ratings of every user to keep for training.
    :type num_given: int
    :param seed: Seed the random generator. Set this value
        if you require reproducible results.
    :type seed: int, optional
    """

    def __init__(self, num_given: int, seed=None):
        super().__init__(seed=seed)
        if isinstance(num_given, bool) or not isinstance(num_given, (int, np.integer)) or num_given <= 0:
            raise ValueError(f"num_given should be a positive integer, got {num_given}.")
        self.num_given = int(num_given)

    def _num_given(self, num_rated: int) -> int:
        return self.num_given


class GivenRatioSplitter(GivenSplitter):
    """Keep ``floor(ratio * n)`` random ratings of every user with ``n`` ratings in the training data,
    assign the others to test data.

    Users for whom ``floor(ratio * n)`` is 0 have all of their ratings in the test data.

    :param ratio: Fraction of every user's ratings to keep for training.
    :type ratio: float
    :param seed: Seed the random generator. Set this value
        if you require reproducible results.
    :type seed: int, optional
    """

    def __init__(self, ratio: float, seed=None):
        super().__init__(seed=seed)
        check_fraction("ratio", ratio)
        self.ratio = ratio

    def _num_given(self, num_rated: int) -> int:
        return int(np.floor(num_rated * self.ratio))
