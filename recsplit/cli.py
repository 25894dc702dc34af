# RecSplit, Rating Matrix Splitting for Recommender Evaluation
# Copyright (C) 2020  Froomle N.V.
# License: GNU AGPLv3 - https://gitlab.com/recpack-maintainers/recpack/-/blob/master/LICENSE
# Author:
#   Lien Michiels
#   Robin Verachtert

import logging
import os

import click
import pandas as pd

from recsplit.config import SplitConfig
from recsplit.data_splitter import DataSplitter
from recsplit.export import dump_partition
from recsplit.matrix import RatingMatrix
from recsplit.splitters import Partition
from recsplit.util import rescale_id_space

logger = logging.getLogger("recsplit")

USER_MAPPING_FILE = "user_ids.csv"
ITEM_MAPPING_FILE = "item_ids.csv"


def prep_data(input_file, user_column_name, item_column_name, rating_column_name, timestamp_column_name):
    """
    Read the raw input file and turn it into a RatingMatrix.

    User and item ids are mapped onto a contiguous range of indices.
    The mappings are returned as dataframes with the raw id and the index.
    """
    dataframe = pd.read_csv(input_file)

    item_id_mapping = rescale_id_space(dataframe[item_column_name].unique())
    user_id_mapping = rescale_id_space(dataframe[user_column_name].unique())

    dataframe[RatingMatrix.ITEM_IX] = dataframe[item_column_name].map(item_id_mapping)
    dataframe[RatingMatrix.USER_IX] = dataframe[user_column_name].map(user_id_mapping)

    rating_ix = rating_column_name
    if rating_column_name is not None and rating_column_name not in dataframe:
        logger.warning(f"Rating column {rating_column_name} not found in input file. Using ones instead.")
        rating_ix = None

    data = RatingMatrix(
        dataframe,
        RatingMatrix.ITEM_IX,
        RatingMatrix.USER_IX,
        rating_ix=rating_ix,
        timestamp_ix=timestamp_column_name,
        shape=(len(user_id_mapping), len(item_id_mapping)),
    )

    user_mapping = pd.DataFrame(
        {user_column_name: list(user_id_mapping.keys()), RatingMatrix.USER_IX: list(user_id_mapping.values())}
    )
    item_mapping = pd.DataFrame(
        {item_column_name: list(item_id_mapping.keys()), RatingMatrix.ITEM_IX: list(item_id_mapping.values())}
    )

    return data, user_mapping, item_mapping


def save_partition(partition: Partition, output_dir: str) -> None:
    os.makedirs(output_dir, exist_ok=True)

    partition.train.save(os.path.join(output_dir, "train"))
    if partition.validation is not None:
        partition.validation.save(os.path.join(output_dir, "validation"))
    partition.test.save(os.path.join(output_dir, "test"))


input_options = [
    click.option('--input_file', type=click.Path(exists=True, dir_okay=False, readable=True), required=True),
    click.option('--user_column_name', type=str, default='userId', show_default=True),
    click.option('--item_column_name', type=str, default='itemId', show_default=True),
    click.option('--rating_column_name', type=str, default='rating', show_default=True),
    click.option('--timestamp_column_name', type=str, default=None, show_default=True),
]


def with_input_options(f):
    for option in reversed(input_options):
        f = option(f)
    return f


@click.group()
@click.option('-v', '--verbose', is_flag=True, help="Log debug information.")
def main(verbose):
    """Split rating data for recommender evaluation."""
    if verbose:
        logger.setLevel(logging.DEBUG)


@main.command()
@click.option('-c', '--config', type=click.File('r'), required=True)
@click.option('--output_dir', type=click.Path(file_okay=False, writable=True), required=True)
@with_input_options
def split(
    config,
    output_dir,
    input_file,
    user_column_name,
    item_column_name,
    rating_column_name,
    timestamp_column_name,
):
    """Split the ratings in INPUT_FILE as configured, and save the splits to OUTPUT_DIR."""
    # Construct config obj, will also validate the config.
    config_obj = SplitConfig(config)

    data, user_mapping, item_mapping = prep_data(
        input_file, user_column_name, item_column_name, rating_column_name, timestamp_column_name
    )

    splitter = config_obj.build_splitter()
    partitions = splitter.partitions(data)
    debug_dir = config_obj.get_debug_dir()

    for k, partition in enumerate(partitions, start=1):
        # Cross validation splitters write every fold to its own directory.
        subdir = f"fold_{k}" if len(partitions) > 1 else ""

        directory = os.path.join(output_dir, subdir)
        save_partition(partition, directory)
        click.echo(f"Saved {'/'.join(str(s) for s in partition.sizes)} ratings to {directory}")

        if debug_dir is not None:
            fold_debug_dir = os.path.join(debug_dir, subdir)
            os.makedirs(fold_debug_dir, exist_ok=True)
            dump_partition(partition, fold_debug_dir)

    user_mapping.to_csv(os.path.join(output_dir, USER_MAPPING_FILE), index=False)
    item_mapping.to_csv(os.path.join(output_dir, ITEM_MAPPING_FILE), index=False)


@main.command()
@click.option('--output_file', type=click.Path(dir_okay=False, writable=True), default='sample.txt', show_default=True)
@click.option('--num_users', type=int, default=-1, show_default=True, help="Number of users to sample, -1 for all.")
@click.option('--num_items', type=int, default=-1, show_default=True, help="Number of items to sample, -1 for all.")
@click.option('--seed', type=int, default=None)
@with_input_options
def sample(
    output_file,
    num_users,
    num_items,
    seed,
    input_file,
    user_column_name,
    item_column_name,
    rating_column_name,
    timestamp_column_name,
):
    """Write a random sample of the ratings in INPUT_FILE to OUTPUT_FILE."""
    data, _, _ = prep_data(input_file, user_column_name, item_column_name, rating_column_name, timestamp_column_name)

    count = DataSplitter(data, seed=seed).get_sample(num_users, num_items, output_file)

    click.echo(f"Sampled {count} ratings to {output_file}")
