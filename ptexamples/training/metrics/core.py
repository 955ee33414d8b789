# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Accuracy and loss accounting for the training and evaluation loops.

A prediction is correct when the index of the highest score equals the
target label. torch.argmax returns the lowest index among tied maxima, so
ties resolve deterministically.

An empty pass has no accuracy: `accuracy` is None there, never 0.0, so
"nothing was evaluated" can't be mistaken for "everything was wrong".
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import torch

from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def count_correct(scores: torch.Tensor, target: torch.Tensor) -> int:
    """Number of rows of `scores` whose argmax equals `target`."""
    predicted = scores.argmax(dim=-1)
    return int(predicted.eq(target).sum().item())


def accuracy(correct: int, total: int) -> Optional[float]:
    """correct / total, or None when nothing was counted."""
    if total < 0 or correct < 0 or correct > total:
        raise ValueError(f"Inconsistent counts: correct={correct}, total={total}")
    if total == 0:
        return None
    return correct / total


@dataclass
class AccuracyTracker:
    """
    Running totals over one pass.

    Invariant: 0 <= total_correct <= total_count after every update.
    """

    total_correct: int = 0
    total_count: int = 0
    total_loss: float = 0.0
    batches: int = field(default=0)

    def update(self, scores: torch.Tensor, target: torch.Tensor, loss: Optional[float] = None) -> int:
        """Fold one batch into the totals and return its correct count."""
        correct = count_correct(scores, target)
        self.total_correct += correct
        self.total_count += int(target.numel())
        if loss is not None:
            self.total_loss += loss
        self.batches += 1
        return correct

    @property
    def accuracy(self) -> Optional[float]:
        return accuracy(self.total_correct, self.total_count)

    @property
    def average_loss(self) -> Optional[float]:
        """Summed loss divided by examples seen (None when empty)."""
        if self.total_count == 0:
            return None
        return self.total_loss / self.total_count

    def reset(self) -> None:
        self.total_correct = 0
        self.total_count = 0
        self.total_loss = 0.0
        self.batches = 0


def format_accuracy(value: Optional[float]) -> str:
    """Render an accuracy for logs; an empty pass shows as 'n/a'."""
    if value is None:
        return "n/a"
    return f"{value:.2%}"
