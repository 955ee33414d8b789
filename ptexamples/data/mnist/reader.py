# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
IDX reader for MNIST and Fashion-MNIST.

Both datasets ship as four files with the same names:
  train-images-idx3-ubyte.gz   train-labels-idx1-ubyte.gz
  t10k-images-idx3-ubyte.gz    t10k-labels-idx1-ubyte.gz

Download them into one folder per dataset (MNIST from yann.lecun.com,
Fashion-MNIST from zalandoresearch/fashion-mnist). Uncompressed copies
without the .gz suffix are read as well.

IDX layout: a big-endian header (magic, then one uint32 per dimension)
followed by the raw uint8 payload. Image magic is 2051, label magic 2049.
"""

import gzip
import logging
import struct
from dataclasses import dataclass
from pathlib import Path

import torch

from ptexamples.errors import DatasetError
from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)

IMAGES_MAGIC = 2051
LABELS_MAGIC = 2049

_FILE_STEMS = {
    "train": ("train-images-idx3-ubyte", "train-labels-idx1-ubyte"),
    "test": ("t10k-images-idx3-ubyte", "t10k-labels-idx1-ubyte"),
}


@dataclass(frozen=True)
class ImageSet:
    """Normalized images (n, 1, rows, cols) as float32 and labels (n,) as int64."""

    images: torch.Tensor
    labels: torch.Tensor

    def __len__(self) -> int:
        return int(self.labels.size(0))


def _locate(dataset_dir: Path, stem: str) -> Path:
    for candidate in (dataset_dir / f"{stem}.gz", dataset_dir / stem):
        if candidate.is_file():
            return candidate
    raise DatasetError(f"IDX file '{stem}[.gz]' not found in {dataset_dir}")


def _read_bytes(path: Path) -> bytes:
    if path.suffix == ".gz":
        with gzip.open(path, "rb") as handle:
            return handle.read()
    return path.read_bytes()


def parse_idx(data: bytes, expected_magic: int, source: str = "<bytes>") -> torch.Tensor:
    """
    Decode an IDX payload into a uint8 tensor shaped by its header.

    Raises:
        DatasetError: On a wrong magic number or a truncated payload.
    """
    if len(data) < 4:
        raise DatasetError(f"{source}: too short to be an IDX file")

    (magic,) = struct.unpack(">i", data[:4])
    if magic != expected_magic:
        raise DatasetError(f"{source}: bad magic {magic}, expected {expected_magic}")

    n_dims = magic & 0xFF
    header_size = 4 + 4 * n_dims
    if len(data) < header_size:
        raise DatasetError(f"{source}: truncated header")
    dims = struct.unpack(f">{n_dims}i", data[4:header_size])

    expected_size = 1
    for dim in dims:
        expected_size *= dim
    if len(data) - header_size != expected_size:
        raise DatasetError(
            f"{source}: payload holds {len(data) - header_size} bytes, header promises {expected_size}"
        )

    flat = torch.frombuffer(bytearray(data[header_size:]), dtype=torch.uint8)
    return flat.reshape(dims)


def read_mnist(
    dataset_dir: Path,
    split: str,
    mean: float = 0.1307,
    std: float = 0.3081,
) -> ImageSet:
    """
    Read one split, scale pixels to [0, 1] and normalize with (mean, std).

    Raises:
        DatasetError: If files are missing, malformed, or disagree on count.
    """
    if split not in _FILE_STEMS:
        raise ValueError(f"Unknown MNIST split '{split}'. Expected one of {tuple(_FILE_STEMS)}")

    images_stem, labels_stem = _FILE_STEMS[split]
    images_path = _locate(dataset_dir, images_stem)
    labels_path = _locate(dataset_dir, labels_stem)

    raw_images = parse_idx(_read_bytes(images_path), IMAGES_MAGIC, str(images_path))
    raw_labels = parse_idx(_read_bytes(labels_path), LABELS_MAGIC, str(labels_path))

    if raw_images.dim() != 3:
        raise DatasetError(f"{images_path}: expected 3 dimensions, got {raw_images.dim()}")
    if raw_images.size(0) != raw_labels.size(0):
        raise DatasetError(
            f"{dataset_dir}: {raw_images.size(0)} images but {raw_labels.size(0)} labels"
        )

    images = raw_images.to(torch.float32).div_(255.0).sub_(mean).div_(std).unsqueeze(1)
    labels = raw_labels.to(torch.long)

    logger.info(
        "MNIST split loaded",
        extra={"split": split, "examples": int(labels.size(0)), "dir": str(dataset_dir)},
    )
    return ImageSet(images=images, labels=labels)
