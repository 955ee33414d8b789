# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
AG_NEWS CSV reader.

The dataset is downloaded separately (for example from the CharCnn_Keras
repository) into a folder holding train.csv and test.csv. Each row is:

    "<label 1-4>","<title>","<description>"

Labels are shifted to 0-3. The text fed to the model is the title and the
description joined by a space.
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path

from ptexamples.errors import DatasetError
from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)

SPLITS = ("train", "test")
NUM_CLASSES = 4


@dataclass(frozen=True)
class NewsRecord:
    """One labelled news item."""

    label: int
    text: str


def split_path(dataset_dir: Path, split: str) -> Path:
    """Location of the CSV file for `split`."""
    if split not in SPLITS:
        raise ValueError(f"Unknown AG_NEWS split '{split}'. Expected one of {SPLITS}")
    return dataset_dir / f"{split}.csv"


def read_ag_news(dataset_dir: Path, split: str) -> list[NewsRecord]:
    """
    Read every record of one split.

    Raises:
        DatasetError: If the file is missing or a row is malformed.
    """
    path = split_path(dataset_dir, split)
    if not path.is_file():
        raise DatasetError(
            f"AG_NEWS {split} file not found: {path}. "
            "Download train.csv and test.csv into the dataset directory."
        )

    records: list[NewsRecord] = []
    with path.open(newline="", encoding="utf-8") as handle:
        for line_no, row in enumerate(csv.reader(handle), start=1):
            if not row:
                continue
            if len(row) < 2:
                raise DatasetError(f"{path}:{line_no}: expected at least 2 columns, got {len(row)}")
            try:
                label = int(row[0]) - 1
            except ValueError as err:
                raise DatasetError(f"{path}:{line_no}: invalid label {row[0]!r}") from err
            if not 0 <= label < NUM_CLASSES:
                raise DatasetError(f"{path}:{line_no}: label {row[0]} outside 1..{NUM_CLASSES}")
            records.append(NewsRecord(label=label, text=" ".join(row[1:])))

    logger.info("AG_NEWS split loaded", extra={"split": split, "records": len(records)})
    return records
