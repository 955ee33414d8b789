# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Epoch driver.

States: epoch 1..N, then terminal. Each epoch:
  1. Materialize the training batches and run one training pass
  2. Optionally evaluate on the held-out batches
  3. Log learning rate, elapsed time and native memory in use
  4. Step the learning rate schedule
  5. Stop early if the wall clock has passed the timeout

The timeout is only checked between epochs; an epoch that has started always
runs to completion. After the last epoch the weights are saved and one final
evaluation over the test batches reports test accuracy.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional

import torch
import torch.nn as nn

from ptexamples.data.batch import BatchSource, materialize
from ptexamples.logging.logger import get_logger
from ptexamples.runtime.device import memory_usage_mb, release_cached_memory
from ptexamples.training.checkpoint.core import save_weights
from ptexamples.training.engine.core import EpochStats, EvalResult, LossFn, evaluate, train_epoch
from ptexamples.training.metrics.core import format_accuracy
from ptexamples.training.scheduler.core import StepDecayScheduler

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class TrainingResult:
    """Final result of a training run."""

    epochs_completed: int
    timed_out: bool
    final_learning_rate: float
    test: EvalResult
    elapsed_seconds: float
    weights_path: Optional[str] = None
    history: list[EpochStats] = field(default_factory=list)

    @property
    def test_accuracy(self) -> Optional[float]:
        return self.test.accuracy


def _current_lr(optimizer: torch.optim.Optimizer) -> float:
    return float(optimizer.param_groups[0]["lr"])


def run_epochs(
    model: nn.Module,
    optimizer: torch.optim.Optimizer,
    loss_fn: LossFn,
    train_data: BatchSource,
    test_data: BatchSource,
    epochs: int,
    *,
    device: Optional[torch.device] = None,
    eval_loss_fn: Optional[LossFn] = None,
    scheduler: Optional[StepDecayScheduler] = None,
    grad_clip: Optional[float] = None,
    log_interval: int = 200,
    timeout_seconds: Optional[float] = None,
    evaluate_each_epoch: bool = False,
    weights_path: Optional[Path] = None,
    weights_metadata: Optional[Mapping[str, object]] = None,
    clock: Callable[[], float] = time.monotonic,
) -> TrainingResult:
    """
    Train for up to `epochs` epochs, then save weights and evaluate once on test data.

    Args:
        model: Model to train.
        optimizer: Optimizer over the model's parameters.
        loss_fn: Training loss.
        train_data: Training batches, or a callable producing fresh ones per epoch.
        test_data: Held-out batches, or a callable producing them.
        epochs: Maximum number of epochs.
        device: Device the batches are moved to.
        eval_loss_fn: Loss used during evaluation; defaults to loss_fn.
        scheduler: Stepped once after every epoch.
        grad_clip: Max gradient norm for the training loop.
        log_interval: Batches between progress logs.
        timeout_seconds: Stop after the first epoch that ends past this much time.
        evaluate_each_epoch: Also evaluate on test data after every epoch.
        weights_path: Where to save the trained weights; None skips saving.
        weights_metadata: Extra fields for the weight file's metadata.
        clock: Monotonic time source, seconds.

    Returns:
        TrainingResult with per-epoch history and the final test evaluation.
    """
    if epochs < 1:
        raise ValueError(f"epochs must be >= 1, got {epochs}")

    eval_loss = eval_loss_fn if eval_loss_fn is not None else loss_fn
    mem_device = device if device is not None else torch.device("cpu")
    history: list[EpochStats] = []
    timed_out = False
    run_start = clock()

    for epoch in range(1, epochs + 1):
        epoch_start = clock()
        logger.info("Epoch started", extra={"epoch": epoch, "epochs": epochs})

        batches = materialize(train_data)
        stats = train_epoch(
            model,
            optimizer,
            loss_fn,
            batches,
            epoch=epoch,
            device=device,
            grad_clip=grad_clip,
            log_interval=log_interval,
        )
        del batches
        history.append(stats)

        if evaluate_each_epoch:
            result = evaluate(model, eval_loss, materialize(test_data), device=device)
            logger.info(
                "Test set",
                extra={
                    "epoch": epoch,
                    "examples": result.total,
                    "average_loss": result.average_loss,
                    "accuracy": format_accuracy(result.accuracy),
                },
            )

        release_cached_memory(mem_device)
        logger.info(
            "End of epoch",
            extra={
                "epoch": epoch,
                "lr": round(_current_lr(optimizer), 6),
                "train_accuracy": format_accuracy(stats.accuracy),
                "time_s": round(clock() - epoch_start, 1),
                "memory_mb": round(memory_usage_mb(mem_device), 1),
            },
        )

        if scheduler is not None:
            scheduler.step()

        elapsed = clock() - run_start
        if timeout_seconds is not None and elapsed > timeout_seconds and epoch < epochs:
            logger.warning(
                "Timeout reached, stopping early",
                extra={"epoch": epoch, "elapsed_s": round(elapsed, 1), "timeout_s": timeout_seconds},
            )
            timed_out = True
            break

    training_elapsed = clock() - run_start
    logger.info("Training finished", extra={"epochs": len(history), "elapsed_s": round(training_elapsed, 1)})

    saved_path: Optional[str] = None
    if weights_path is not None:
        metadata = dict(weights_metadata or {})
        metadata.update({"epochs_completed": len(history), "timed_out": timed_out})
        saved_path = str(save_weights(model, weights_path, metadata))

    test_result = evaluate(model, eval_loss, materialize(test_data), device=device)
    logger.info(
        "End of training",
        extra={
            "test_accuracy": format_accuracy(test_result.accuracy),
            "test_examples": test_result.total,
            "eval_time_s": round(test_result.elapsed_seconds, 1),
        },
    )

    return TrainingResult(
        epochs_completed=len(history),
        timed_out=timed_out,
        final_learning_rate=_current_lr(optimizer),
        test=test_result,
        elapsed_seconds=clock() - run_start,
        weights_path=saved_path,
        history=history,
    )
