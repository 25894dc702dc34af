# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from recsplit.matrix import RatingMatrix


@dataclass(frozen=True)
class Partition:
    """Disjoint subsets of the ratings in a RatingMatrix.

    Iterating a Partition yields ``train, test``,
    or ``train, validation, test`` if there is a validation subset,
    so it can be unpacked like a tuple::

        train, test = splitter.split(data)
    """

    train: RatingMatrix
    test: RatingMatrix
    validation: Optional[RatingMatrix] = None

    @property
    def matrices(self) -> Tuple[RatingMatrix, ...]:
        if self.validation is None:
            return (self.train, self.test)
        return (self.train, self.validation, self.test)

    @property
    def sizes(self) -> Tuple[int, ...]:
        """Number of ratings in every subset, in the order of :attr:`matrices`."""
        return tuple(m.num_ratings for m in self.matrices)

    def __iter__(self) -> Iterator[RatingMatrix]:
        return iter(self.matrices)

    def __len__(self) -> int:
        return len(self.matrices)


class FailureReason(Enum):
    FOLDS_NOT_ASSIGNED = "no folds were assigned"
    FOLD_INDEX_OUT_OF_RANGE = "fold index out of range"
    FOLD_PLAN_MISMATCH = "fold plan does not match the ratings"
    UNKNOWN_VIEW = "unknown view name"


class SplitError(Exception):
    """Raised when the partition of a failed :class:`SplitResult` is requested.

    :param reason: Why the split failed.
    :type reason: FailureReason
    :param message: Details on the failure.
    :type message: str
    """

    def __init__(self, reason: FailureReason, message: str = ""):
        self.reason = reason
        super().__init__(f"{reason.value}: {message}" if message else reason.value)


@dataclass(frozen=True)
class SplitResult:
    """Outcome of a split request that can fail at runtime.

    Holds either a :class:`Partition` or the :class:`FailureReason` why there is none.
    A SplitResult is truthy only if it holds a partition.
    """

    partition: Optional[Partition] = None
    failure: Optional[FailureReason] = None
    message: str = ""

    @classmethod
    def success(cls, partition: Partition) -> "SplitResult":
        return cls(partition=partition)

    @classmethod
    def failed(cls, reason: FailureReason, message: str = "") -> "SplitResult":
        return cls(failure=reason, message=message)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> Partition:
        """The partition of a successful split.

        :raises SplitError: If the split failed.
        :return: The partition.
        :rtype: Partition
        """
        if not self.ok:
            raise SplitError(self.failure, self.message)
        return self.partition
