# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging
from typing import Optional, Union

import numpy as np
from sklearn.utils import check_random_state

from recsplit.export import dump_partition, write_sample
from recsplit.matrix import Matrix, Timestamps, to_rating_matrix
from recsplit.registries import DATA_VIEW_REGISTRY
from recsplit.splitters import (
    FailureReason,
    FoldPlan,
    GivenNSplitter,
    GivenRatioSplitter,
    ItemDateSplitter,
    Partition,
    RatingDateSplitter,
    RatioSplitter,
    RatioValidationSplitter,
    SplitResult,
    UserDateSplitter,
    build_fold_plan,
)
from recsplit.util import sample_positions

logger = logging.getLogger("recsplit")


class DataSplitter:
    """Split or sample a rating matrix.

    The DataSplitter offers every splitting policy of :mod:`recsplit.splitters` on one matrix.
    The source matrix is never modified: every split returns new matrices,
    which together contain each rating of the source exactly once.

    All random draws come from a single random state, seeded with ``seed``.
    Two DataSplitters with the same seed, used in the same way, produce the same splits.

    **Example**

    ::

        splitter = DataSplitter(data, num_folds=5, seed=42)
        for k in range(1, 6):
            train, test = splitter.get_kth_fold(k).unwrap()

        train, test = splitter.get_ratio(0.8)
        train, validation, test = splitter.get_ratio(0.6, 0.2)

    :param rate_matrix: The ratings to split.
    :type rate_matrix: Matrix
    :param num_folds: If given, ratings are assigned to this number of folds right away,
        and folds can be retrieved with :meth:`get_kth_fold`.
    :type num_folds: int, optional
    :param seed: Seed the random generator. Set this value
        if you require reproducible results.
        Defaults to None, which results in a random seed.
    :type seed: Union[int, np.random.RandomState], optional
    :param debug_dir: If given, the training and test data of every two-way split
        are written to ``training.txt`` and ``test.txt`` in this directory.
    :type debug_dir: str, optional
    """

    def __init__(
        self,
        rate_matrix: Matrix,
        num_folds: Optional[int] = None,
        seed: Optional[Union[int, np.random.RandomState]] = None,
        debug_dir: Optional[str] = None,
    ):
        self.rate_matrix = to_rating_matrix(rate_matrix)
        self.seed = seed
        self.debug_dir = debug_dir
        self._rstate = check_random_state(seed)

        self.fold_plan: Optional[FoldPlan] = None
        if num_folds is not None:
            self.fold_plan = self.split_folds(num_folds)

    @property
    def num_folds(self) -> int:
        """Number of folds of :attr:`fold_plan`, 0 if no folds were assigned."""
        return 0 if self.fold_plan is None else self.fold_plan.num_folds

    def split_folds(self, num_folds: int) -> FoldPlan:
        """Assign every rating to one of ``num_folds`` folds of (near) equal size.

        The returned plan is also kept as :attr:`fold_plan`,
        used by :meth:`get_kth_fold` when no plan is passed.

        :param num_folds: Number of folds, reduced to the number of ratings if larger.
        :type num_folds: int
        :return: The fold plan.
        :rtype: FoldPlan
        """
        self.fold_plan = build_fold_plan(self.rate_matrix, num_folds, self._rstate)
        return self.fold_plan

    def get_kth_fold(self, k: int, fold_plan: Optional[FoldPlan] = None) -> SplitResult:
        """Use the k-th fold as test data, and all other folds as training data.

        :param k: The 1-based fold index.
        :type k: int
        :param fold_plan: The fold assignment to use. Defaults to :attr:`fold_plan`.
        :type fold_plan: FoldPlan, optional
        :return: Result with the partition,
            or a failure if no folds were assigned or ``k`` is out of range.
        :rtype: SplitResult
        """
        fold_plan = self.fold_plan if fold_plan is None else fold_plan

        if fold_plan is None:
            return SplitResult.failed(FailureReason.FOLDS_NOT_ASSIGNED)

        result = fold_plan.fold(self.rate_matrix, k)
        if result.ok:
            self._debug_info(result.partition, fold=k)
        return result

    def get_ratio(self, ratio: float, valid_ratio: Optional[float] = None) -> Partition:
        """Split ratings randomly into training and test data,
        or into training, validation and test data if ``valid_ratio`` is given.

        :param ratio: Probability of a rating to be assigned to training data.
        :type ratio: float
        :param valid_ratio: Probability of a rating to be assigned to validation data.
        :type valid_ratio: float, optional
        :return: Partition of ``train`` and ``test``, with ``validation`` if ``valid_ratio`` is given.
        :rtype: Partition
        """
        if valid_ratio is None:
            partition = RatioSplitter(ratio, seed=self._rstate).split(self.rate_matrix)
            self._debug_info(partition)
            return partition

        partition = RatioValidationSplitter(ratio, valid_ratio, seed=self._rstate).split(self.rate_matrix)
        logger.debug(f"training amount: {partition.train.num_ratings}, validation amount: "
                     f"{partition.validation.num_ratings}, test amount: {partition.test.num_ratings}")
        return partition

    def get_ratio_by_rating_date(self, ratio: float, timestamps: Optional[Timestamps] = None) -> Partition:
        """Assign the ``floor(ratio * |ratings|)`` earliest ratings to test data, the others to training data.

        :param ratio: Fraction of ratings assigned to test data.
        :type ratio: float
        :param timestamps: Timestamp of every rating.
            Defaults to the timestamps of the rating matrix.
        :type timestamps: Timestamps, optional
        :rtype: Partition
        """
        partition = RatingDateSplitter(ratio, timestamps=timestamps).split(self.rate_matrix)
        self._debug_info(partition)
        return partition

    def get_ratio_by_user_date(
        self, ratio: float, timestamps: Optional[Timestamps] = None, chronological: bool = True
    ) -> Partition:
        """Split the ratings of every user on time.

        The meaning of ``ratio`` depends on ``chronological``.
        If True, the ``floor(ratio * n)`` earliest ratings of every user are test data.
        If False, every rating is training data with probability ``ratio``,
        so the same ``ratio`` gives the complementary split sizes.

        :param ratio: Fraction of every user's ratings assigned to test data if ``chronological``,
            else the probability of a rating to be assigned to training data.
        :type ratio: float
        :param timestamps: Timestamp of every rating.
            Defaults to the timestamps of the rating matrix.
        :type timestamps: Timestamps, optional
        :param chronological: Split on time if True, randomly otherwise. Defaults to True.
        :type chronological: bool, optional
        :rtype: Partition

        See :class:`recsplit.splitters.UserDateSplitter`.
        """
        partition = UserDateSplitter(
            ratio, timestamps=timestamps, chronological=chronological, seed=self._rstate
        ).split(self.rate_matrix)
        self._debug_info(partition)
        return partition

    def get_ratio_by_item_date(
        self, ratio: float, timestamps: Optional[Timestamps] = None, chronological: bool = True
    ) -> Partition:
        """Split the ratings of every item on time.

        As :meth:`get_ratio_by_user_date`, ``ratio`` is the fraction of test data
        if ``chronological``, and the probability of training data otherwise.

        See :class:`recsplit.splitters.ItemDateSplitter`.
        """
        partition = ItemDateSplitter(
            ratio, timestamps=timestamps, chronological=chronological, seed=self._rstate
        ).split(self.rate_matrix)
        self._debug_info(partition)
        return partition

    def get_given(self, given: Union[int, float]) -> Partition:
        """Keep a number of random ratings of every user for training, and use the others for testing.

        If ``given`` is an int, every user keeps ``given`` ratings,
        users with at most ``given`` ratings keep all of them.
        If ``given`` is a float in ]0, 1[, a user with ``n`` ratings keeps ``floor(given * n)`` of them.

        :param given: Number, or fraction, of ratings per user to keep for training.
        :type given: Union[int, float]
        :rtype: Partition
        """
        if isinstance(given, bool):
            raise ValueError(f"given should be an int or a float, got {given}.")

        if isinstance(given, (int, np.integer)):
            splitter = GivenNSplitter(given, seed=self._rstate)
        else:
            splitter = GivenRatioSplitter(given, seed=self._rstate)

        partition = splitter.split(self.rate_matrix)
        self._debug_info(partition)
        return partition

    def get_data_view(self, view: str) -> SplitResult:
        """Split the ratings according to a named view.

        The only view defined by default is ``"cold-start"``:
        ratings of users with fewer than 5 ratings are test data,
        ratings of the other users are training data.
        More views can be added to :data:`recsplit.registries.DATA_VIEW_REGISTRY`.

        :param view: Name of the view, case insensitive.
        :type view: str
        :return: Result with the partition, or a failure if the view is unknown.
        :rtype: SplitResult
        """
        if view not in DATA_VIEW_REGISTRY:
            return SplitResult.failed(FailureReason.UNKNOWN_VIEW, view)

        partition = DATA_VIEW_REGISTRY.get(view)().split(self.rate_matrix)
        self._debug_info(partition)
        return SplitResult.success(partition)

    def get_sample(self, num_users: int, num_items: int, path: str) -> int:
        """Write a random sample of the ratings to ``path``.

        ``num_users`` users and ``num_items`` items are drawn without replacement,
        values less than or equal to 0, or larger than the number of users (items), select all.
        Every rating of a sampled user for a sampled item is written
        as a ``"<user + 1> <item + 1> <rating>"`` line.

        :param num_users: Number of users to sample.
        :type num_users: int
        :param num_items: Number of items to sample.
        :type num_items: int
        :param path: File to write the sample to, it is overwritten.
        :type path: str
        :return: The number of sampled ratings.
        :rtype: int
        """
        rows, cols = self.rate_matrix.shape
        users = rows if num_users <= 0 or num_users > rows else num_users
        items = cols if num_items <= 0 or num_items > cols else num_items

        user_ids = sample_positions(self._rstate, users, rows)
        item_ids = sample_positions(self._rstate, items, cols)

        return write_sample(self.rate_matrix, user_ids, item_ids, path)

    def _debug_info(self, partition: Partition, fold: int = -1) -> None:
        fold_info = f"Fold [{fold}]: " if fold > 0 else ""
        logger.debug(
            f"{fold_info}training amount: {partition.train.num_ratings}, test amount: {partition.test.num_ratings}"
        )

        if self.debug_dir is not None:
            dump_partition(partition, self.debug_dir)
