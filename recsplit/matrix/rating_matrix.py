# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert
from copy import copy, deepcopy
from dataclasses import dataclass, asdict
import logging
from typing import Iterator, List, Optional, Set, Tuple, Union
import yaml

import pandas as pd
import numpy as np
from scipy.sparse import csr_matrix

from recsplit.util import df_to_sparse

logger = logging.getLogger("recsplit")


class RatingMatrix:
    """A RatingMatrix contains the ratings users gave to items, and optionally the time of each rating.

    Rows are users, columns are items. A cell holds the rating a user gave an item,
    a missing cell means the item was not rated.
    Ratings equal to zero are treated as missing and dropped on construction.

    Every (user, item) pair occurs at most once.
    If the dataframe contains the same pair multiple times, the last occurrence is kept.

    Ratings are stored in row-major order: sorted by user, and by item within a user.
    All positional operations (such as the masks used by the splitters)
    refer to this order.

    :param df: Dataframe containing the ratings. Must contain at least
        item ids and user ids.
    :type df: pd.DataFrame
    :param item_ix: Item ids column name.
    :type item_ix: str
    :param user_ix: User ids column name.
    :type user_ix: str
    :param rating_ix: Rating values column name.
        If None, every rating is set to 1.
    :type rating_ix: str, optional
    :param timestamp_ix: Rating timestamps column name.
    :type timestamp_ix: str, optional
    :param shape: The desired shape of the matrix, i.e. the number of users and items.
        If no shape is specified, the number of users will be equal to the
        maximum user id plus one, the number of items to the maximum item
        id plus one.
    :type shape: Tuple[int, int], optional
    """

    ITEM_IX = "iid"
    USER_IX = "uid"
    RATING_IX = "rating"
    TIMESTAMP_IX = "ts"

    @dataclass
    class RatingMatrixProperties:
        num_users: int
        num_items: int
        has_timestamps: bool

        def to_dict(self):
            return asdict(self)

    def __init__(
        self,
        df: pd.DataFrame,
        item_ix: str,
        user_ix: str,
        rating_ix: Optional[str] = None,
        timestamp_ix: Optional[str] = None,
        shape: Optional[Tuple[int, int]] = None,
    ):
        col_mapper = {
            item_ix: RatingMatrix.ITEM_IX,
            user_ix: RatingMatrix.USER_IX,
        }
        columns = [RatingMatrix.USER_IX, RatingMatrix.ITEM_IX, RatingMatrix.RATING_IX]

        if rating_ix is not None:
            col_mapper[rating_ix] = RatingMatrix.RATING_IX

        if timestamp_ix is not None:
            col_mapper[timestamp_ix] = RatingMatrix.TIMESTAMP_IX
            columns.append(RatingMatrix.TIMESTAMP_IX)

        df = df.rename(columns=col_mapper)
        if rating_ix is None:
            df = df.assign(**{RatingMatrix.RATING_IX: 1.0})

        df = df[columns].copy()
        df[RatingMatrix.RATING_IX] = df[RatingMatrix.RATING_IX].astype(np.float64)

        # Zero means "not rated".
        df = df[df[RatingMatrix.RATING_IX] != 0]

        duplicated = df.duplicated([RatingMatrix.USER_IX, RatingMatrix.ITEM_IX], keep="last")
        if duplicated.any():
            logger.warning(f"Dropping {duplicated.sum()} duplicate ratings, keeping the last rating of each pair.")
            df = df[~duplicated]

        self._df = df.sort_values(
            [RatingMatrix.USER_IX, RatingMatrix.ITEM_IX], kind="mergesort"
        ).reset_index(drop=True)

        n_users_df = int(self._df[RatingMatrix.USER_IX].max()) + 1 if len(self._df) else 0
        n_items_df = int(self._df[RatingMatrix.ITEM_IX].max()) + 1 if len(self._df) else 0

        num_users = n_users_df if shape is None else shape[0]
        num_items = n_items_df if shape is None else shape[1]

        if n_users_df > num_users:
            raise ValueError(
                "Provided shape does not match dataframe, can't have fewer rows than maximal user identifier."
                f" {num_users} < {n_users_df}"
            )

        if n_items_df > num_items:
            raise ValueError(
                "Provided shape does not match dataframe, can't have fewer columns than maximal item identifier."
                f" {num_items} < {n_items_df}"
            )

        self.shape = (int(num_users), int(num_items))

    def copy(self) -> "RatingMatrix":
        """Create a deep copy of this RatingMatrix.

        :return: Deep copy of this RatingMatrix.
        :rtype: RatingMatrix
        """
        return deepcopy(self)

    @property
    def properties(self) -> "RatingMatrixProperties":
        return self.RatingMatrixProperties(
            num_users=self.shape[0],
            num_items=self.shape[1],
            has_timestamps=self.has_timestamps,
        )

    def save(self, file_prefix: str) -> None:
        """Save the rating matrix to files.

        Creates two files one at ``<file_prefix>.csv`` with the raw dataframe,
        and a second at ``<file_prefix>_properties.yaml`` which contains the properties
        of the rating matrix.

        :param file_prefix: The prefix of the files to save, should end in the filename,
            but without extension (no .csv or such).
        :type file_prefix: str
        """
        self._df.to_csv(f"{file_prefix}.csv", header=True, index=False)

        with open(f"{file_prefix}_properties.yaml", "w") as f:
            f.write(yaml.safe_dump(self.properties.to_dict()))

    @classmethod
    def load(cls, file_prefix: str) -> "RatingMatrix":
        """Create a new rating matrix instance from saved file.

        :param file_prefix: The prefix of the files to load, should end in the filename,
            but without extension (no .csv or such).
        :type file_prefix: str

        :return: RatingMatrix created from file.
        :rtype: RatingMatrix
        """
        with open(f"{file_prefix}_properties.yaml", "r") as f:
            metadata = cls.RatingMatrixProperties(**yaml.safe_load(f))

        df = pd.read_csv(f"{file_prefix}.csv")

        timestamp_ix = cls.TIMESTAMP_IX if metadata.has_timestamps else None
        return RatingMatrix(
            df,
            RatingMatrix.ITEM_IX,
            RatingMatrix.USER_IX,
            rating_ix=RatingMatrix.RATING_IX,
            timestamp_ix=timestamp_ix,
            shape=(metadata.num_users, metadata.num_items),
        )

    @property
    def values(self) -> csr_matrix:
        """All ratings as a sparse matrix of size ``(|users|, |items|)``.

        The stored entries of the csr_matrix are in the same (row-major) order as the ratings
        in this RatingMatrix.

        :return: Ratings as a csr_matrix.
        :rtype: csr_matrix
        """
        return df_to_sparse(self._df, RatingMatrix.ITEM_IX, RatingMatrix.USER_IX, RatingMatrix.RATING_IX, self.shape)

    @property
    def ratings(self) -> np.ndarray:
        """Rating values in row-major order."""
        return self._df[RatingMatrix.RATING_IX].values

    @property
    def has_timestamps(self) -> bool:
        """Boolean indicating whether instance has timestamp information.

        :return: True if timestamps information is available, False otherwise.
        :rtype: bool
        """
        return self.TIMESTAMP_IX in self._df

    @property
    def timestamps(self) -> pd.Series:
        """Timestamps of ratings as a pandas Series, indexed by user ID and item ID.

        :raises AttributeError: If there is no timestamp column.
        :return: Series of timestamps with multi-index on (user ID, item ID)
        :rtype: pd.Series
        """
        if not self.has_timestamps:
            raise AttributeError("No timestamp column, so timestamps could not be retrieved")
        index = pd.MultiIndex.from_frame(self._df[[RatingMatrix.USER_IX, RatingMatrix.ITEM_IX]])
        return self._df[[RatingMatrix.TIMESTAMP_IX]].set_index(index)[RatingMatrix.TIMESTAMP_IX]

    @property
    def indices(self) -> Tuple[np.ndarray, np.ndarray]:
        """User IDs and item IDs of all ratings, in row-major order.

        :return: Tuple of arrays of user IDs and item IDs.
        :rtype: Tuple[np.ndarray, np.ndarray]
        """
        return self._df[RatingMatrix.USER_IX].values, self._df[RatingMatrix.ITEM_IX].values

    @property
    def num_ratings(self) -> int:
        """The total number of ratings, i.e. the number of nonzero cells."""
        return len(self._df)

    def __len__(self) -> int:
        return self.num_ratings

    @property
    def num_rows(self) -> int:
        return self.shape[0]

    @property
    def num_columns(self) -> int:
        return self.shape[1]

    def __iter__(self) -> Iterator[Tuple[int, int, float]]:
        """Iterate over the ratings in row-major order.

        :yield: Tuples of user ID, item ID and rating.
        :rtype: Iterator[Tuple[int, int, float]]
        """
        users, items = self.indices
        for u, i, r in zip(users, items, self.ratings):
            yield int(u), int(i), float(r)

    def row_indices(self, user: int) -> np.ndarray:
        """The items rated by ``user``, in ascending order."""
        mask = self._df[RatingMatrix.USER_IX] == user
        return self._df.loc[mask, RatingMatrix.ITEM_IX].values

    def column_indices(self, item: int) -> np.ndarray:
        """The users who rated ``item``, in ascending order."""
        mask = self._df[RatingMatrix.ITEM_IX] == item
        return self._df.loc[mask, RatingMatrix.USER_IX].values

    def _locate(self, user: int, item: int) -> np.ndarray:
        return np.flatnonzero(
            (self._df[RatingMatrix.USER_IX].values == user) & (self._df[RatingMatrix.ITEM_IX].values == item)
        )

    def get(self, user: int, item: int) -> float:
        """Rating of ``user`` for ``item``, 0.0 if the item was not rated."""
        loc = self._locate(user, item)
        if len(loc) == 0:
            return 0.0
        return float(self._df[RatingMatrix.RATING_IX].values[loc[0]])

    def set(self, user: int, item: int, value: float, timestamp: Optional[int] = None) -> None:
        """Set the rating of ``user`` for ``item`` in place.

        Setting a rating to 0 removes it from the matrix.

        :param user: User ID, should be within the shape of the matrix.
        :type user: int
        :param item: Item ID, should be within the shape of the matrix.
        :type item: int
        :param value: The new rating.
        :type value: float
        :param timestamp: Timestamp of the rating.
            Required when adding a new rating to a matrix with timestamps.
        :type timestamp: int, optional
        """
        if not (0 <= user < self.shape[0] and 0 <= item < self.shape[1]):
            raise IndexError(f"Index ({user}, {item}) out of bounds for shape {self.shape}.")

        loc = self._locate(user, item)

        if value == 0:
            self._df = self._df.drop(index=self._df.index[loc]).reset_index(drop=True)
            return

        if len(loc):
            self._df.loc[self._df.index[loc[0]], RatingMatrix.RATING_IX] = float(value)
            if timestamp is not None and self.has_timestamps:
                self._df.loc[self._df.index[loc[0]], RatingMatrix.TIMESTAMP_IX] = timestamp
            return

        row = {RatingMatrix.USER_IX: user, RatingMatrix.ITEM_IX: item, RatingMatrix.RATING_IX: float(value)}
        if self.has_timestamps:
            if timestamp is None:
                raise ValueError("A timestamp is required to add a rating to a RatingMatrix with timestamps.")
            row[RatingMatrix.TIMESTAMP_IX] = timestamp

        df = pd.concat([self._df, pd.DataFrame([row])], ignore_index=True)
        self._df = df.sort_values([RatingMatrix.USER_IX, RatingMatrix.ITEM_IX], kind="mergesort").reset_index(
            drop=True
        )

    def select(self, mask: np.ndarray) -> "RatingMatrix":
        """Create a new RatingMatrix with only the ratings for which ``mask`` is True.

        :param mask: Boolean array aligned with the row-major order of the ratings.
        :type mask: np.ndarray
        :return: New RatingMatrix with the same shape.
        :rtype: RatingMatrix
        """
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (self.num_ratings,):
            raise ValueError(f"Mask of shape {mask.shape} does not match {self.num_ratings} ratings.")

        rating_m = copy(self)
        rating_m._df = self._df[mask].reset_index(drop=True)
        return rating_m

    def users_in(self, U: Union[Set[int], List[int]]) -> "RatingMatrix":
        """Keep only ratings by one of the specified users.

        :param U: A Set or List of users to select the ratings from.
        :type U: Union[Set[int], List[int]]
        :return: New RatingMatrix object
        :rtype: RatingMatrix
        """
        logger.debug("Performing users_in comparison")

        return self.select(self._df[RatingMatrix.USER_IX].isin(U).values)

    def items_in(self, I: Union[Set[int], List[int]]) -> "RatingMatrix":
        """Keep only ratings of the specified items.

        :param I: A Set or List of items to select the ratings from.
        :type I: Union[Set[int], List[int]]
        :return: New RatingMatrix object
        :rtype: RatingMatrix
        """
        logger.debug("Performing items_in comparison")

        return self.select(self._df[RatingMatrix.ITEM_IX].isin(I).values)

    @property
    def user_counts(self) -> np.ndarray:
        """Number of ratings of every user, an array of length ``num_rows``."""
        return np.bincount(self._df[RatingMatrix.USER_IX].values, minlength=self.shape[0])

    @property
    def item_counts(self) -> np.ndarray:
        """Number of ratings of every item, an array of length ``num_columns``."""
        return np.bincount(self._df[RatingMatrix.ITEM_IX].values, minlength=self.shape[1])

    @property
    def active_users(self) -> Set[int]:
        """The set of all users with at least one rating."""
        return set(self._df[RatingMatrix.USER_IX].unique())

    @property
    def num_active_users(self) -> int:
        return len(self.active_users)

    @property
    def active_items(self) -> Set[int]:
        """The set of all items with at least one rating."""
        return set(self._df[RatingMatrix.ITEM_IX].unique())

    @property
    def num_active_items(self) -> int:
        return len(self.active_items)

    @property
    def density(self) -> float:
        """The fraction of user item pairs that have a rating."""
        num_users, num_items = self.shape
        return self.num_ratings / (num_users * num_items)

    def to_dataframe(self) -> pd.DataFrame:
        """Copy of the ratings as a DataFrame with columns
        :attr:`USER_IX`, :attr:`ITEM_IX`, :attr:`RATING_IX` and, if present, :attr:`TIMESTAMP_IX`.
        """
        return self._df.copy()

    def to_string(self) -> str:
        """Textual form of the matrix, one ``user item rating`` line per rating."""
        header = f"Dimension: {self.shape[0]} x {self.shape[1]}, Size: {self.num_ratings}"
        lines = [f"{u} {i} {r}" for u, i, r in self]
        return "\n".join([header] + lines)

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return f"RatingMatrix(shape={self.shape}, num_ratings={self.num_ratings})"

    @classmethod
    def from_csr_matrix(cls, X: csr_matrix) -> "RatingMatrix":
        """Create a RatingMatrix from a csr_matrix containing ratings.

        .. warning::
            No timestamps can be passed this way!

        :return: RatingMatrix constructed from the csr_matrix.
        :rtype: RatingMatrix
        """
        coo = X.tocoo()
        df = pd.DataFrame({cls.USER_IX: coo.row, cls.ITEM_IX: coo.col, cls.RATING_IX: coo.data})

        return RatingMatrix(df, cls.ITEM_IX, cls.USER_IX, rating_ix=cls.RATING_IX, shape=X.shape)
