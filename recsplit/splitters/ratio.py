# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging

from recsplit.matrix import Matrix, to_rating_matrix
from recsplit.splitters.results import Partition
from recsplit.splitters.splitter_base import RandomSplitter
from recsplit.util import check_fraction

logger = logging.getLogger("recsplit")


class RatioSplitter(RandomSplitter):
    """Split ratings randomly, assigning each rating to training data with probability ``ratio``.

    Each rating is an independent trial,
    so the realized fraction of training data approximates ``ratio``,
    but will rarely be equal to it.

    :param ratio: Probability of a rating to be assigned to the training data.
    :type ratio: float
    :param seed: Seed the random generator. Set this value
        if you require reproducible results.
    :type seed: int, optional
    """

    def __init__(self, ratio: float, seed=None):
        super().__init__(seed=seed)
        check_fraction("ratio", ratio)
        self.ratio = ratio

    def split(self, data: Matrix) -> Partition:
        """Splits ratings randomly into a training and test subset.

        :param data: Ratings to split.
        :type data: Matrix
        :return: Partition with ``train`` and ``test`` ratings.
        :rtype: Partition
        """
        data = to_rating_matrix(data)

        draws = self._rstate.random_sample(data.num_ratings)
        in_train = draws < self.ratio

        logger.debug(f"{self.identifier} - Split successful")

        return Partition(train=data.select(in_train), test=data.select(~in_train))


class RatioValidationSplitter(RandomSplitter):
    """Split ratings randomly into training, validation and test data.

    A single draw per rating decides its subset:
    a draw below ``train_ratio`` assigns the rating to training data,
    a draw below ``train_ratio + valid_ratio`` to validation data,
    all others to test data.

    :param train_ratio: Probability of a rating to be assigned to the training data.
    :type train_ratio: float
    :param valid_ratio: Probability of a rating to be assigned to the validation data.
    :type valid_ratio: float
    :param seed: Seed the random generator. Set this value
        if you require reproducible results.
    :type seed: int, optional
    """

    def __init__(self, train_ratio: float, valid_ratio: float, seed=None):
        super().__init__(seed=seed)
        check_fraction("train_ratio", train_ratio)
        check_fraction("valid_ratio", valid_ratio)
        if train_ratio + valid_ratio >= 1:
            raise ValueError(
                f"train_ratio + valid_ratio should be smaller than 1, got {train_ratio} + {valid_ratio}."
            )

        self.train_ratio = train_ratio
        self.valid_ratio = valid_ratio

    def split(self, data: Matrix) -> Partition:
        """Splits ratings randomly into a training, validation and test subset.

        :param data: Ratings to split.
        :type data: Matrix
        :return: Partition with ``train``, ``validation`` and ``test`` ratings.
        :rtype: Partition
        """
        data = to_rating_matrix(data)

        draws = self._rstate.random_sample(data.num_ratings)
        in_train = draws < self.train_ratio
        in_valid = ~in_train & (draws < self.train_ratio + self.valid_ratio)
        in_test = ~(in_train | in_valid)

        logger.debug(f"{self.identifier} - Split successful")

        return Partition(
            train=data.select(in_train),
            validation=data.select(in_valid),
            test=data.select(in_test),
        )
