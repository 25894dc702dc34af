# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import os

import pandas as pd
import pytest
from click.testing import CliRunner

from recsplit.cli import main, prep_data
from recsplit.matrix import RatingMatrix


@pytest.fixture(scope="function")
def ratings_csv(tmp_path):
    df = pd.DataFrame(
        {
            "userId": ["u1", "u1", "u1", "u2", "u2", "u3", "u3", "u3", "u3", "u3"],
            "itemId": [10, 20, 30, 10, 40, 10, 20, 30, 40, 50],
            "rating": [5, 4, 3, 2, 1, 1, 2, 3, 4, 5],
            "timestamp": [1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
        }
    )
    path = tmp_path / "ratings.csv"
    df.to_csv(path, index=False)
    return str(path)


def write_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    return str(path)


def test_prep_data(ratings_csv):
    data, user_mapping, item_mapping = prep_data(ratings_csv, "userId", "itemId", "rating", "timestamp")

    assert data.shape == (3, 5)
    assert data.num_ratings == 10
    assert data.has_timestamps
    assert list(user_mapping["userId"]) == ["u1", "u2", "u3"]
    assert list(user_mapping[RatingMatrix.USER_IX]) == [0, 1, 2]
    assert list(item_mapping["itemId"]) == [10, 20, 30, 40, 50]


def test_prep_data_missing_ratings(ratings_csv):
    data, _, _ = prep_data(ratings_csv, "userId", "itemId", "score", None)

    assert not data.has_timestamps
    assert set(data.ratings) == {1.0}


def test_split(ratings_csv, tmp_path):
    config = write_config(
        tmp_path,
        "splitter:\n  type: RatingDateSplitter\n  params:\n    ratio: 0.3\n",
    )
    output_dir = str(tmp_path / "out")

    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "split",
            "-c",
            config,
            "--output_dir",
            output_dir,
            "--input_file",
            ratings_csv,
            "--timestamp_column_name",
            "timestamp",
        ],
    )

    assert result.exit_code == 0, result.output

    train = RatingMatrix.load(os.path.join(output_dir, "train"))
    test = RatingMatrix.load(os.path.join(output_dir, "test"))

    assert train.num_ratings == 7
    assert test.num_ratings == 3
    # Earliest ratings are those of u1.
    assert test.active_users == {0}

    assert os.path.exists(os.path.join(output_dir, "user_ids.csv"))
    assert os.path.exists(os.path.join(output_dir, "item_ids.csv"))


def test_split_validation(ratings_csv, tmp_path):
    config = write_config(
        tmp_path,
        "splitter:\n  type: RatioValidationSplitter\n  params:\n    train_ratio: 0.5\n    valid_ratio: 0.25\nseed: 1\n",
    )
    output_dir = str(tmp_path / "out")

    result = CliRunner().invoke(
        main, ["split", "-c", config, "--output_dir", output_dir, "--input_file", ratings_csv]
    )

    assert result.exit_code == 0, result.output
    for name in ["train", "validation", "test"]:
        assert os.path.exists(os.path.join(output_dir, f"{name}.csv"))


def test_split_k_fold(ratings_csv, tmp_path):
    config = write_config(tmp_path, "splitter:\n  type: KFoldSplitter\n  params:\n    num_folds: 2\nseed: 42\n")
    output_dir = str(tmp_path / "out")

    result = CliRunner().invoke(
        main, ["split", "-c", config, "--output_dir", output_dir, "--input_file", ratings_csv]
    )

    assert result.exit_code == 0, result.output

    sizes = []
    for k in [1, 2]:
        test = RatingMatrix.load(os.path.join(output_dir, f"fold_{k}", "test"))
        sizes.append(test.num_ratings)

    assert sizes == [5, 5]


def test_split_debug_dir(ratings_csv, tmp_path):
    debug_dir = tmp_path / "debug"
    debug_dir.mkdir()
    config = write_config(
        tmp_path,
        f"splitter:\n  type: ColdStartSplitter\n  params:\n    threshold: 3\ndebug_dir: {debug_dir}\n",
    )

    result = CliRunner().invoke(
        main, ["split", "-c", config, "--output_dir", str(tmp_path / "out"), "--input_file", ratings_csv]
    )

    assert result.exit_code == 0, result.output
    # u2 is the only user with fewer than 3 ratings.
    assert (debug_dir / "test.txt").read_text().split("\n")[0] == "Dimension: 3 x 5, Size: 2"


def test_split_k_fold_debug_dir(ratings_csv, tmp_path):
    debug_dir = tmp_path / "debug"
    config = write_config(
        tmp_path, f"splitter:\n  type: KFoldSplitter\n  params:\n    num_folds: 2\nseed: 42\ndebug_dir: {debug_dir}\n"
    )

    result = CliRunner().invoke(
        main, ["split", "-c", config, "--output_dir", str(tmp_path / "out"), "--input_file", ratings_csv]
    )

    assert result.exit_code == 0, result.output
    for k in [1, 2]:
        header = (debug_dir / f"fold_{k}" / "test.txt").read_text().split("\n")[0]
        assert header == "Dimension: 3 x 5, Size: 5"


def test_split_invalid_config(ratings_csv, tmp_path):
    config = write_config(tmp_path, "splitter:\n  type: FooSplitter\n")

    result = CliRunner().invoke(
        main, ["split", "-c", config, "--output_dir", str(tmp_path / "out"), "--input_file", ratings_csv]
    )

    assert result.exit_code != 0
    assert isinstance(result.exception, AssertionError)


def test_sample(ratings_csv, tmp_path):
    output_file = str(tmp_path / "sample.txt")

    result = CliRunner().invoke(
        main,
        ["sample", "--input_file", ratings_csv, "--output_file", output_file, "--num_users", "1", "--seed", "3"],
    )

    assert result.exit_code == 0, result.output
    assert "Sampled" in result.output

    with open(output_file) as f:
        lines = [line for line in f.read().split("\n") if line]

    # A single user, with all of their ratings.
    assert len({line.split(" ")[0] for line in lines}) == 1
    assert len(lines) in [2, 3, 5]
