# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Batching for image datasets.

Shuffling draws from an explicit generator, so the batch order for a given
seed does not depend on how much randomness model initialization or dropout
consumed from the global state.
"""

from typing import Optional

import torch

from ptexamples.data.batch import Batch
from ptexamples.data.mnist.reader import ImageSet


def make_image_batches(
    dataset: ImageSet,
    batch_size: int,
    device: Optional[torch.device] = None,
    generator: Optional[torch.Generator] = None,
    shuffle: bool = False,
) -> list[Batch]:
    """
    Split `dataset` into batches of `batch_size` (the last one may be smaller).

    Args:
        dataset: Images and labels.
        batch_size: Examples per batch.
        device: Where the batch tensors should live.
        generator: Generator for the shuffle permutation.
        shuffle: Permute the examples before batching.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    count = len(dataset)
    if shuffle:
        order = torch.randperm(count, generator=generator)
    else:
        order = torch.arange(count)

    batches: list[Batch] = []
    for start in range(0, count, batch_size):
        index = order[start : start + batch_size]
        images = dataset.images.index_select(0, index)
        labels = dataset.labels.index_select(0, index)
        if device is not None:
            images = images.to(device)
            labels = labels.to(device)
        batches.append(Batch(inputs=(images,), target=labels))
    return batches
