# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

"""

The splitters module contains the policies used to partition ratings
into training, (validation) and test data.

Every splitter takes a :class:`recsplit.matrix.RatingMatrix` (or a ``csr_matrix``)
and returns a :class:`Partition` of disjoint RatingMatrices,
which together contain every rating of the input exactly once.
Ratings are never altered, only assigned to one of the subsets.

.. currentmodule:: recsplit.splitters

.. autosummary::
    :toctree: generated/

    Splitter
    RatioSplitter
    RatioValidationSplitter
    RatingDateSplitter
    UserDateSplitter
    ItemDateSplitter
    GivenNSplitter
    GivenRatioSplitter
    ColdStartSplitter
    KFoldSplitter

Splitters that draw random numbers accept a ``seed``.
Set it if you require reproducible results.

K-fold cross validation is built on a :class:`FoldPlan`,
which assigns every rating to a fold once and can then be used to retrieve every fold.
Retrieving a fold returns a :class:`SplitResult`, which holds either the partition
or the :class:`FailureReason` why no partition could be made.

"""

from recsplit.splitters.results import FailureReason, Partition, SplitError, SplitResult
from recsplit.splitters.splitter_base import RandomSplitter, Splitter

from recsplit.splitters.chronological import EntityDateSplitter, ItemDateSplitter, RatingDateSplitter, UserDateSplitter
from recsplit.splitters.folds import FoldPlan, KFoldSplitter, build_fold_plan
from recsplit.splitters.given import GivenNSplitter, GivenRatioSplitter, GivenSplitter
from recsplit.splitters.ratio import RatioSplitter, RatioValidationSplitter
from recsplit.splitters.views import ColdStartSplitter
