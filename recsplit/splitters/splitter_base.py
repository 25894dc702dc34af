# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Union

import numpy as np
from sklearn.utils import check_random_state

from recsplit.matrix import Matrix
from recsplit.splitters.results import Partition


logger = logging.getLogger("recsplit")


class Splitter(ABC):
    """Base class for defining a splitter.

    Each splitter implements a split method,
    which partitions the ratings of a matrix into disjoint subsets.
    """

    @abstractmethod
    def split(self, data: Matrix) -> Partition:
        """Abstract method to be implemented by the child class.

        Splits the ratings into a training and test subset,
        and optionally a validation subset.

        :param data: Ratings to split
        :type data: Matrix
        """
        raise NotImplementedError()

    def partitions(self, data: Matrix) -> List[Partition]:
        """All partitions this splitter produces for ``data``.

        A single :meth:`split` for most splitters,
        one partition per fold for cross validation splitters.

        :param data: Ratings to split
        :type data: Matrix
        :return: List of partitions.
        :rtype: List[Partition]
        """
        return [self.split(data)]

    @property
    def name(self):
        """The name of the splitter."""
        return self.__class__.__name__

    @property
    def identifier(self):
        """String identifier of the splitter object,
        contains name and parameter values."""
        paramstring = ",".join((f"{k}={v}" for k, v in self.__dict__.items() if not k.startswith("_")))
        return self.name + f"({paramstring})"


class RandomSplitter(Splitter):
    """Base class for splitters that draw random numbers.

    All draws come from one random state, owned by the splitter.

    :param seed: Seed the random generator. Set this value
        if you require reproducible results.
        A ``np.random.RandomState`` can be passed to share a random state between splitters.
        Defaults to None, which results in a random seed.
    :type seed: Union[int, np.random.RandomState], optional
    """

    def __init__(self, seed: Optional[Union[int, np.random.RandomState]] = None):
        super().__init__()
        self.seed = seed
        self._rstate = check_random_state(seed)

    @property
    def random_state(self) -> np.random.RandomState:
        return self._rstate
