# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The unit of work handed to the training and evaluation loops.

A Batch pairs the model inputs (one tensor for image models, token ids plus
offsets for the embedding-bag model) with the target labels. Loops consume
each batch once and keep no reference to it afterwards.

Batch sequences are materialized eagerly into lists before a loop begins.
A BatchSource is either such a list or a zero-argument callable producing a
fresh one, which is how a reshuffled training set is handed out per epoch.
"""

from dataclasses import dataclass
from typing import Callable, Sequence, Union

import torch


@dataclass(frozen=True)
class Batch:
    """Model inputs and target labels for one step."""

    inputs: tuple[torch.Tensor, ...]
    target: torch.Tensor

    @property
    def size(self) -> int:
        """Number of labelled examples in the batch."""
        return int(self.target.size(0))

    def to(self, device: torch.device) -> "Batch":
        """Copy of this batch with every tensor moved to `device`."""
        return Batch(
            inputs=tuple(t.to(device) for t in self.inputs),
            target=self.target.to(device),
        )


BatchSource = Union[Sequence[Batch], Callable[[], Sequence[Batch]]]


def materialize(source: BatchSource) -> list[Batch]:
    """Produce the full list of batches for one pass."""
    if callable(source):
        return list(source())
    return list(source)
