# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging
from abc import abstractmethod
from typing import Optional

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from recsplit.matrix import Matrix, RatingMatrix, Timestamps, lookup_timestamps, to_rating_matrix
from recsplit.splitters.results import Partition
from recsplit.splitters.splitter_base import RandomSplitter, Splitter
from recsplit.util import check_fraction

logger = logging.getLogger("recsplit")


class RatingDateSplitter(Splitter):
    """Split ratings on a single point in time, such that
    the ``floor(ratio * |ratings|)`` earliest ratings are assigned to test data,
    and all later ratings to training data.

    Ratings with the same timestamp keep their row-major order.
    No randomness is involved: the same data always results in the same split.

    :param ratio: Fraction of ratings, counted from the earliest,
        assigned to the test data.
    :type ratio: float
    :param timestamps: Timestamp of every rating, indexed by (user, item).
        Defaults to None, which uses the timestamps of the rating matrix.
    :type timestamps: Timestamps, optional
    """

    def __init__(self, ratio: float, timestamps: Optional[Timestamps] = None):
        super().__init__()
        check_fraction("ratio", ratio)
        self.ratio = ratio
        self._timestamps = timestamps

    def split(self, data: Matrix) -> Partition:
        """Splits the ratings on the timestamp of the ``floor(ratio * |ratings|)``-th rating.

        :param data: Ratings to split.
            Must contain timestamps, unless they were passed to the splitter.
        :type data: Matrix
        :return: Partition with the later ratings in ``train``
            and the earliest ratings in ``test``.
        :rtype: Partition
        """
        data = to_rating_matrix(data)
        ts = lookup_timestamps(data, self._timestamps)

        order = np.argsort(ts, kind="stable")
        cut = int(np.floor(self.ratio * data.num_ratings))

        in_test = np.zeros(data.num_ratings, dtype=bool)
        in_test[order[:cut]] = True

        logger.debug(f"{self.identifier} - Split successful")

        return Partition(train=data.select(~in_test), test=data.select(in_test))


class EntityDateSplitter(RandomSplitter):
    """Base class for splitting the ratings of every user or item on time.

    The ratings of each entity are sorted by timestamp (ties keep their row-major order).

    If ``chronological`` is True, the ``floor(ratio * n)`` earliest of the ``n`` ratings
    of every entity are assigned to test data, the others to training data.

    If ``chronological`` is False, every rating is assigned to training data
    with probability ``ratio``, drawn in the sorted order.
    This reproduces the behaviour of earlier releases of this split.

    :param ratio: Fraction of every entity's ratings assigned to test data
        if ``chronological``, else the probability of a rating to be assigned to training data.
    :type ratio: float
    :param timestamps: Timestamp of every rating, indexed by (user, item).
        Defaults to None, which uses the timestamps of the rating matrix.
    :type timestamps: Timestamps, optional
    :param chronological: Split every entity's ratings on time if True,
        randomly otherwise. Defaults to True.
    :type chronological: bool, optional
    :param seed: Seed the random generator, only used if not ``chronological``.
    :type seed: int, optional
    """

    @property
    @abstractmethod
    def ENTITY_IX(self) -> str:
        """Column of the entity whose ratings are split, set by child classes."""
        raise NotImplementedError()

    def __init__(
        self,
        ratio: float,
        timestamps: Optional[Timestamps] = None,
        chronological: bool = True,
        seed=None,
    ):
        super().__init__(seed=seed)
        check_fraction("ratio", ratio)
        self.ratio = ratio
        self.chronological = chronological
        self._timestamps = timestamps

    def split(self, data: Matrix) -> Partition:
        """Splits the ratings of every entity on time.

        :param data: Ratings to split.
            Must contain timestamps, unless they were passed to the splitter.
        :type data: Matrix
        :return: Partition with ``train`` and ``test`` ratings.
        :rtype: Partition
        """
        data = to_rating_matrix(data)
        ts = lookup_timestamps(data, self._timestamps)

        contexts = pd.DataFrame(
            {
                RatingMatrix.USER_IX: data.indices[0],
                RatingMatrix.ITEM_IX: data.indices[1],
                RatingMatrix.TIMESTAMP_IX: ts,
            }
        )

        in_test = np.zeros(data.num_ratings, dtype=bool)

        for _, history in tqdm(contexts.groupby(self.ENTITY_IX, sort=True)):
            # Index of the contexts frame is the row-major position of the rating.
            positions = history.sort_values(RatingMatrix.TIMESTAMP_IX, kind="mergesort").index.values

            if self.chronological:
                cut = int(np.floor(self.ratio * len(positions)))
                in_test[positions[:cut]] = True
            else:
                draws = self._rstate.random_sample(len(positions))
                in_test[positions[draws >= self.ratio]] = True

        logger.debug(f"{self.identifier} - Split successful")

        return Partition(train=data.select(~in_test), test=data.select(in_test))


class UserDateSplitter(EntityDateSplitter):
    """Split the ratings of every user on time.

    See :class:`EntityDateSplitter` for the parameters.
    """

    ENTITY_IX = RatingMatrix.USER_IX


class ItemDateSplitter(EntityDateSplitter):
    """Split the ratings of every item on time.

    See :class:`EntityDateSplitter` for the parameters.
    """

    ENTITY_IX = RatingMatrix.ITEM_IX
