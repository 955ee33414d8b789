# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Training and evaluation loops.

The training loop is explicit. For every batch:
  1. Zero gradients
  2. Forward pass
  3. Loss against the target labels
  4. Backward pass
  5. Gradient clipping (when a threshold is configured)
  6. Optimizer step
  7. Update the running accuracy and log every `log_interval` batches

The evaluation loop runs forward only, under torch.no_grad() with the model
in eval mode, and accumulates summed loss and correct predictions.

Each batch is handled by a step function whose intermediates (scores,
loss, the device copy of the batch) exist only in its frame and in the
batch's TensorScope. Once the step returns the scope holds the last
references, so leaving the scope frees them before the next batch starts,
exceptions included.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import torch
import torch.nn as nn

from ptexamples.data.batch import Batch
from ptexamples.logging.logger import get_logger
from ptexamples.runtime.device import TensorScope, ensure_same_device
from ptexamples.training.metrics.core import AccuracyTracker, format_accuracy

logger: logging.Logger = get_logger(__name__)

LossFn = Callable[[torch.Tensor, torch.Tensor], torch.Tensor]


@dataclass(frozen=True)
class EpochStats:
    """Outcome of one training pass."""

    epoch: int
    batches: int
    correct: int
    count: int
    accuracy: Optional[float]
    average_loss: Optional[float]
    elapsed_seconds: float


@dataclass(frozen=True)
class EvalResult:
    """Outcome of one evaluation pass. accuracy is None when no examples were seen."""

    correct: int
    total: int
    total_loss: float
    accuracy: Optional[float]
    average_loss: Optional[float]
    elapsed_seconds: float


def _summed_loss(loss_fn: LossFn, loss: torch.Tensor, batch_size: int) -> float:
    """Loss summed over the batch, whatever reduction the loss function uses."""
    value = float(loss.item())
    if getattr(loss_fn, "reduction", "mean") == "sum":
        return value
    return value * batch_size


def _prepare(batch: Batch, device: Optional[torch.device]) -> Batch:
    if device is not None:
        batch = batch.to(device)
    ensure_same_device(*batch.inputs, batch.target)
    return batch


def _train_step(
    model: nn.Module,
    optimizer: torch.optim.Optimizer,
    loss_fn: LossFn,
    batch: Batch,
    scope: TensorScope,
    tracker: AccuracyTracker,
    grad_clip: Optional[float],
) -> float:
    """One update on `batch`. Returns the batch loss as a plain float."""
    optimizer.zero_grad()

    scores = scope.track(model(*batch.inputs))
    loss = scope.track(loss_fn(scores, batch.target))

    loss.backward()

    if grad_clip is not None:
        torch.nn.utils.clip_grad_norm_(model.parameters(), grad_clip)

    optimizer.step()

    tracker.update(scores.detach(), batch.target, loss=_summed_loss(loss_fn, loss, batch.size))
    return float(loss.item())


def _eval_step(
    model: nn.Module,
    loss_fn: LossFn,
    batch: Batch,
    scope: TensorScope,
    tracker: AccuracyTracker,
) -> None:
    scores = scope.track(model(*batch.inputs))
    loss = scope.track(loss_fn(scores, batch.target))
    tracker.update(scores, batch.target, loss=_summed_loss(loss_fn, loss, batch.size))


def train_epoch(
    model: nn.Module,
    optimizer: torch.optim.Optimizer,
    loss_fn: LossFn,
    batches: Sequence[Batch],
    epoch: int = 1,
    device: Optional[torch.device] = None,
    grad_clip: Optional[float] = None,
    log_interval: int = 200,
    empty_cache: bool = False,
) -> EpochStats:
    """
    Run one training pass over `batches`.

    Args:
        model: The model to train; put into train mode.
        optimizer: Updates the model's weights once per batch.
        loss_fn: Maps (scores, target) to a scalar loss.
        batches: The full, already materialized batch sequence.
        epoch: Epoch number, for logs.
        device: Move each batch here first; None leaves batches where they are.
        grad_clip: Max total gradient norm; None disables clipping.
        log_interval: Log cumulative accuracy every N batches.
        empty_cache: Return cached CUDA blocks to the driver after every batch.

    Returns:
        EpochStats. accuracy is None when `batches` is empty.
    """
    if log_interval < 1:
        raise ValueError(f"log_interval must be >= 1, got {log_interval}")

    model.train()
    tracker = AccuracyTracker()
    batch_count = len(batches)
    start = time.monotonic()

    for batch_idx, raw_batch in enumerate(batches, start=1):
        with TensorScope(device, empty_cache=empty_cache) as scope:
            batch_loss = _train_step(
                model, optimizer, loss_fn, _prepare(raw_batch, device), scope, tracker, grad_clip
            )

        if batch_idx % log_interval == 0:
            logger.info(
                "Training progress",
                extra={
                    "epoch": epoch,
                    "batch": batch_idx,
                    "batches": batch_count,
                    "examples": tracker.total_count,
                    "loss": round(batch_loss, 4),
                    "accuracy": format_accuracy(tracker.accuracy),
                },
            )

    elapsed = time.monotonic() - start
    if tracker.total_count == 0:
        logger.warning("Training pass saw no batches", extra={"epoch": epoch})

    return EpochStats(
        epoch=epoch,
        batches=tracker.batches,
        correct=tracker.total_correct,
        count=tracker.total_count,
        accuracy=tracker.accuracy,
        average_loss=tracker.average_loss,
        elapsed_seconds=elapsed,
    )


def evaluate(
    model: nn.Module,
    loss_fn: LossFn,
    batches: Sequence[Batch],
    device: Optional[torch.device] = None,
) -> EvalResult:
    """
    Forward-only pass over held-out `batches`.

    No gradients are recorded and no weights change, so two calls with the
    same model and batches return identical results.
    """
    model.eval()
    tracker = AccuracyTracker()
    start = time.monotonic()

    with torch.no_grad():
        for raw_batch in batches:
            with TensorScope(device) as scope:
                _eval_step(model, loss_fn, _prepare(raw_batch, device), scope, tracker)

    return EvalResult(
        correct=tracker.total_correct,
        total=tracker.total_count,
        total_loss=tracker.total_loss,
        accuracy=tracker.accuracy,
        average_loss=tracker.average_loss,
        elapsed_seconds=time.monotonic() - start,
    )
