# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import inspect
from typing import Dict

import recsplit.splitters
from recsplit.splitters import ColdStartSplitter, Splitter


class Registry:
    """
    A Registry is a wrapper for a dictionary that maps
    names to Python types (most often classes).
    """

    def __init__(self, src=None):
        self.registered: Dict[str, type] = {}
        self.src = src

    def __getitem__(self, key: str) -> type:
        """Retrieve the type for the given key.

        :param key: the key of the type to fetch
        :type key: str
        :returns: The class type associated with the key
        :rtype: type
        """
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        """Check if the given key is known to the registry.

        :param key: The key to check.
        :type key: str
        :return: True if the key is known
        :rtype: bool
        """
        try:
            self.get(key)
            return True
        except (AttributeError, KeyError):
            return False

    def get(self, key: str) -> type:
        """Retrieve the value for this key. This value is a Python type (most often a class).

        :param key: The key to fetch
        :type key: str
        :raises KeyError: If the key is unknown and there is no source module.
        :return: The class type associated with the key
        :rtype: type
        """
        if key in self.registered:
            return self.registered[key]
        if self.src is None:
            raise KeyError(f"key {key} is not registered")
        return getattr(self.src, key)

    def register(self, key: str, c: type):
        """Register a new Python type (most often a class).

        After registration, the key can be used to fetch the Python type from the registry.

        :param key: key to register the type at. Needs to be unique to the registry.
        :type key: str
        :param c: class to register.
        :type c: type
        """
        if key in self:
            raise KeyError(f"key {key} already registered")
        self.registered[key] = c


class SplitterRegistry(Registry):
    """Registry for easy retrieval of splitter types by name.

    The splitters in :mod:`recsplit.splitters` are available by their class name.
    Other splitters can be added with :meth:`register`.
    """

    def __init__(self):
        super().__init__(recsplit.splitters)

    def get(self, key: str) -> type:
        c = super().get(key)
        if not (isinstance(c, type) and issubclass(c, Splitter)) or inspect.isabstract(c):
            raise KeyError(f"{key} is not a splitter")
        return c


class DataViewRegistry(Registry):
    """Registry of named data views.

    A data view is a splitter without parameters that need to be chosen,
    retrieved by a case-insensitive name such as ``"cold-start"``.
    """

    def get(self, key: str) -> type:
        return super().get(key.lower())

    def register(self, key: str, c: type):
        super().register(key.lower(), c)


SPLITTER_REGISTRY = SplitterRegistry()

DATA_VIEW_REGISTRY = DataViewRegistry()
DATA_VIEW_REGISTRY.register("cold-start", ColdStartSplitter)
