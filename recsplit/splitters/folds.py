# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging
from dataclasses import dataclass
from typing import Iterator, List, Tuple

import numpy as np
from scipy.sparse import csr_matrix

from recsplit.matrix import Matrix, RatingMatrix, to_rating_matrix
from recsplit.splitters.results import FailureReason, Partition, SplitResult
from recsplit.splitters.splitter_base import RandomSplitter

logger = logging.getLogger("recsplit")


@dataclass(frozen=True, eq=False)
class FoldPlan:
    """Assignment of every rating of a matrix to one of ``num_folds`` folds.

    Fold ids are 1-based and stored in the row-major order of the ratings.
    A plan only applies to ratings with the exact sparsity pattern it was built for.

    Create a plan with :func:`build_fold_plan`.
    """

    num_folds: int
    assignments: np.ndarray
    shape: Tuple[int, int]
    users: np.ndarray
    items: np.ndarray

    @property
    def fold_sizes(self) -> np.ndarray:
        """Number of ratings in every fold, the size of fold ``k`` is at index ``k - 1``."""
        return np.bincount(self.assignments, minlength=self.num_folds + 1)[1:]

    def matches(self, data: RatingMatrix) -> bool:
        """Whether this plan was built for ratings with the sparsity pattern of ``data``."""
        users, items = data.indices
        return (
            tuple(data.shape) == tuple(self.shape)
            and np.array_equal(users, self.users)
            and np.array_equal(items, self.items)
        )

    def as_matrix(self) -> csr_matrix:
        """The fold assignment as a sparse matrix, with the fold id of every rating as value."""
        return csr_matrix((self.assignments, (self.users, self.items)), shape=self.shape)

    def fold(self, data: Matrix, k: int) -> SplitResult:
        """Use fold ``k`` as test data, and all other folds as training data.

        :param data: The ratings the plan was built for.
        :type data: Matrix
        :param k: The 1-based index of the test fold.
        :type k: int
        :return: Successful result with a partition of ``train`` and ``test``,
            or a failed result if ``k`` is out of range or the plan does not match ``data``.
        :rtype: SplitResult
        """
        data = to_rating_matrix(data)

        if not 1 <= k <= self.num_folds:
            return SplitResult.failed(
                FailureReason.FOLD_INDEX_OUT_OF_RANGE, f"fold {k} not in [1, {self.num_folds}]"
            )

        if not self.matches(data):
            return SplitResult.failed(FailureReason.FOLD_PLAN_MISMATCH)

        in_test = self.assignments == k

        return SplitResult.success(Partition(train=data.select(~in_test), test=data.select(in_test)))

    def folds(self, data: Matrix) -> Iterator[Partition]:
        """Every fold in turn as test data.

        :param data: The ratings the plan was built for.
        :type data: Matrix
        :yield: Partition for fold 1 up to ``num_folds``.
        :rtype: Iterator[Partition]
        """
        for k in range(1, self.num_folds + 1):
            yield self.fold(data, k).unwrap()


def build_fold_plan(data: Matrix, num_folds: int, rstate: np.random.RandomState) -> FoldPlan:
    """Assign the ratings in ``data`` to ``num_folds`` folds of (near) equal size.

    In row-major order the i-th rating gets label ``floor(i * num_folds / n) + 1``,
    so fold sizes differ by at most one.
    The labels are then shuffled over the ratings
    by sorting them on a uniform random key per rating.

    If there are fewer ratings than folds,
    the number of folds is reduced to the number of ratings.

    :param data: Ratings to assign to folds.
    :type data: Matrix
    :param num_folds: Number of folds, must be positive.
    :type num_folds: int
    :param rstate: Random state to draw the keys from.
    :type rstate: np.random.RandomState
    :raises ValueError: If ``num_folds`` is not positive or there are no ratings.
    :return: The fold plan.
    :rtype: FoldPlan
    """
    if num_folds <= 0:
        raise ValueError(f"num_folds should be positive, got {num_folds}.")

    data = to_rating_matrix(data)
    num_ratings = data.num_ratings

    if num_ratings == 0:
        raise ValueError("Can't assign folds without ratings.")

    if num_folds > num_ratings:
        logger.warning(f"Only {num_ratings} ratings, reducing the number of folds from {num_folds} to {num_ratings}.")
        num_folds = num_ratings

    labels = (np.arange(num_ratings) * num_folds) // num_ratings + 1
    keys = rstate.random_sample(num_ratings)
    assignments = labels[np.argsort(keys, kind="stable")]

    users, items = data.indices
    users, items = users.copy(), items.copy()
    for arr in (assignments, users, items):
        arr.setflags(write=False)

    return FoldPlan(num_folds=num_folds, assignments=assignments, shape=data.shape, users=users, items=items)


class KFoldSplitter(RandomSplitter):
    """Split ratings into ``num_folds`` folds, and use every fold once as test data.

    :meth:`partitions` returns the partition of every fold, all from one fold plan.
    :meth:`split` holds out a single fold of a new plan as test data.

    :param num_folds: Number of folds.
    :type num_folds: int
    :param seed: Seed the random generator. Set this value
        if you require reproducible results.
    :type seed: int, optional
    """

    def __init__(self, num_folds: int, seed=None):
        super().__init__(seed=seed)
        if num_folds <= 0:
            raise ValueError(f"num_folds should be positive, got {num_folds}.")
        self.num_folds = num_folds

    def plan(self, data: Matrix) -> FoldPlan:
        return build_fold_plan(data, self.num_folds, self._rstate)

    def split(self, data: Matrix) -> Partition:
        """Assigns the ratings to folds, and uses the first fold as test data.

        :param data: Ratings to split.
        :type data: Matrix
        :return: Partition with fold 1 as ``test`` data, and all other folds as ``train`` data.
        :rtype: Partition
        """
        data = to_rating_matrix(data)
        partition = self.plan(data).fold(data, 1).unwrap()

        logger.debug(f"{self.identifier} - Split successful")

        return partition

    def partitions(self, data: Matrix) -> List[Partition]:
        """Splits the ratings into folds.

        :param data: Ratings to split.
        :type data: Matrix
        :return: One partition per fold, with that fold as ``test`` data.
        :rtype: List[Partition]
        """
        data = to_rating_matrix(data)
        partitions = list(self.plan(data).folds(data))

        logger.debug(f"{self.identifier} - Split successful")

        return partitions
