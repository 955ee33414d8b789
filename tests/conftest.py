# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for ptexamples tests.

Fixtures here are available to every test file automatically. The dataset
fixtures write tiny AG_NEWS CSV files and MNIST IDX files into tmp_path so
no test ever needs a download.
"""

import csv
import gzip
import struct
import textwrap
from pathlib import Path
from typing import Callable

import pytest
import torch

IdxWriter = Callable[[Path, int, tuple[int, ...], bytes], Path]

_TOPICS = ("world", "sports", "business", "science")


def _write_idx(path: Path, magic: int, dims: tuple[int, ...], payload: bytes) -> Path:
    header = struct.pack(">i", magic) + struct.pack(f">{len(dims)}i", *dims)
    if path.suffix == ".gz":
        with gzip.open(path, "wb") as handle:
            handle.write(header + payload)
    else:
        path.write_bytes(header + payload)
    return path


def _write_news_split(path: Path, rows: int) -> None:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, quoting=csv.QUOTE_ALL)
        for i in range(rows):
            label = i % len(_TOPICS)
            topic = _TOPICS[label]
            writer.writerow(
                [str(label + 1), f"{topic.title()} headline {i}", f"a {topic} story about {topic}"]
            )


def _write_mnist_split(directory: Path, prefix: str, count: int, seed: int) -> None:
    generator = torch.Generator().manual_seed(seed)
    pixels = torch.randint(0, 256, (count, 28, 28), dtype=torch.uint8, generator=generator)
    labels = torch.arange(count, dtype=torch.uint8) % 10
    _write_idx(
        directory / f"{prefix}-images-idx3-ubyte.gz", 2051, (count, 28, 28), bytes(pixels.flatten().tolist())
    )
    _write_idx(directory / f"{prefix}-labels-idx1-ubyte.gz", 2049, (count,), bytes(labels.tolist()))


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    Create a minimal valid config YAML file in a temp directory.

    This is the smallest config that passes schema validation.
    Tests that need specific config values should write their own files.
    """
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "ptexamples-test"
          seed: 42
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """A config file that's valid YAML but fails schema validation (missing required field)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "ptexamples-test"
          seed: 42
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


@pytest.fixture()
def ag_news_dir(tmp_path: Path) -> Path:
    """A folder with a 40-row train.csv and a 12-row test.csv, labels cycling 1..4."""
    directory = tmp_path / "AG_NEWS"
    directory.mkdir()
    _write_news_split(directory / "train.csv", 40)
    _write_news_split(directory / "test.csv", 12)
    return directory


@pytest.fixture()
def mnist_dir(tmp_path: Path) -> Path:
    """A folder with 32 train and 16 test random 28x28 images in gzipped IDX files."""
    directory = tmp_path / "mnist"
    directory.mkdir()
    _write_mnist_split(directory, "train", 32, seed=0)
    _write_mnist_split(directory, "t10k", 16, seed=1)
    return directory


@pytest.fixture()
def idx_writer() -> IdxWriter:
    """Write an IDX file: idx_writer(path, magic, dims, payload). A .gz suffix compresses it."""
    return _write_idx
