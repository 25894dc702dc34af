# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import yaml

from recsplit.registries import SPLITTER_REGISTRY
from recsplit.splitters import RandomSplitter, Splitter


class SplitConfig:
    """Configuration of a split, read from YAML.

    Example config::

        splitter:
          type: GivenNSplitter
          params:
            num_given: 10
        seed: 42
        debug_dir: /tmp/splits

    :param config_file: YAML document, as an open file or a string.
    """

    def __init__(self, config_file):
        self.config = yaml.safe_load(config_file)
        self.validate()

    def validate(self):
        assert isinstance(self.config, dict), "Config should be a mapping"

        assert "splitter" in self.config, "Config is missing the splitter section"
        assert "type" in self.config["splitter"], "Splitter type is missing"
        assert self.config["splitter"]["type"] in SPLITTER_REGISTRY, (
            f"Unknown splitter type {self.config['splitter']['type']}"
        )
        assert isinstance(self.config["splitter"].get("params", {}), dict), "Splitter params should be a mapping"

        seed = self.config.get("seed")
        assert seed is None or isinstance(seed, int), "Seed should be an integer"

    def get_splitter(self):
        return self.config["splitter"]["type"], self.config["splitter"].get("params", {})

    def get_seed(self):
        return self.config.get("seed")

    def get_debug_dir(self):
        return self.config.get("debug_dir")

    def build_splitter(self) -> Splitter:
        """Construct the configured splitter.

        Splitters that draw random numbers get the configured seed,
        unless their params contain a seed themselves.
        """
        s_type, s_params = self.get_splitter()
        splitter_cls = SPLITTER_REGISTRY.get(s_type)

        params = dict(s_params)
        if issubclass(splitter_cls, RandomSplitter):
            params.setdefault("seed", self.get_seed())

        return splitter_cls(**params)
