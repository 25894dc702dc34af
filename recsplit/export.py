# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

"""Export of ratings to text files.

Exports are best effort: a failure to write is logged, but never raised,
so it can not interrupt the computation of a split.
"""

import logging
import os
from typing import List, Sequence

import numpy as np

from recsplit.matrix import RatingMatrix
from recsplit.splitters import Partition

logger = logging.getLogger("recsplit")

SAMPLE_BATCH_SIZE = 1500

TRAINING_FILE = "training.txt"
TEST_FILE = "test.txt"


def _append_lines(path: str, lines: List[str]) -> None:
    with open(path, "a") as f:
        f.write("\n".join(lines) + "\n")


def format_rating(user: int, item: int, rating: float) -> str:
    """A sample line: 1-based user and item id, and the rating as single precision float."""
    return f"{user + 1} {item + 1} {np.float32(rating)}"


def write_sample(
    data: RatingMatrix,
    user_ids: Sequence[int],
    item_ids: Sequence[int],
    path: str,
    batch_size: int = SAMPLE_BATCH_SIZE,
) -> int:
    """Write the ratings of the selected users for the selected items to ``path``.

    Every (user, item) pair of the cross product with a positive rating
    results in one ``"<user + 1> <item + 1> <rating>"`` line.
    The file is truncated first, and lines are appended in batches of ``batch_size``.

    :param data: Ratings to sample from.
    :type data: RatingMatrix
    :param user_ids: Users to include, in the order they are written.
    :type user_ids: Sequence[int]
    :param item_ids: Items to include, in the order they are written.
    :type item_ids: Sequence[int]
    :param path: File to write to.
    :type path: str
    :param batch_size: Number of lines to buffer before writing, defaults to 1500.
    :type batch_size: int, optional
    :return: The number of sampled ratings.
    :rtype: int
    """
    user_ids = np.asarray(user_ids, dtype=int)
    item_ids = np.asarray(item_ids, dtype=int)

    sample = data.values[user_ids][:, item_ids].tocsr()

    count = 0
    lines = []
    try:
        open(path, "w").close()

        for row, user in enumerate(user_ids):
            row_values = sample.getrow(row).toarray().ravel()
            for col in np.flatnonzero(row_values > 0):
                lines.append(format_rating(user, item_ids[col], row_values[col]))
                count += 1

                if len(lines) >= batch_size:
                    _append_lines(path, lines)
                    lines.clear()

        if lines:
            _append_lines(path, lines)
    except OSError:
        logger.exception(f"Failed to write sample to {path}")

    logger.debug(f"Sample [size: {count}] has been created!")
    return count


def dump_partition(partition: Partition, directory: str) -> None:
    """Write the textual form of the training and test data of ``partition`` into ``directory``.

    :param partition: Partition to dump.
    :type partition: Partition
    :param directory: Existing directory to write ``training.txt`` and ``test.txt`` into.
    :type directory: str
    """
    try:
        with open(os.path.join(directory, TRAINING_FILE), "w") as f:
            f.write(partition.train.to_string())
        with open(os.path.join(directory, TEST_FILE), "w") as f:
            f.write(partition.test.to_string())
    except OSError:
        logger.exception(f"Failed to dump partition to {directory}")
