# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Step-decay learning rate schedule.

  lr(k) = base_lr * gamma ** (k // step_size)

where k counts scheduler steps (one per epoch in the examples). With
step_size = 1 the rate after k steps is exactly base_lr * gamma ** k.

The formula lives in a standalone function; StepDecayScheduler only keeps the
step count and writes the result into the optimizer's param groups. It is
recomputed from the base rate every time, never multiplied in place, so
float error does not pile up.
"""

import logging

import torch

from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def get_learning_rate(step: int, base_lr: float, step_size: int, gamma: float) -> float:
    """
    Learning rate after `step` scheduler steps.

    Raises:
        ValueError: On a negative step or non-positive step_size.
    """
    if step < 0:
        raise ValueError(f"step must be >= 0, got {step}")
    if step_size < 1:
        raise ValueError(f"step_size must be >= 1, got {step_size}")
    return base_lr * gamma ** (step // step_size)


def set_learning_rate(optimizer: torch.optim.Optimizer, lr: float) -> None:
    """Set the learning rate on all parameter groups of an optimizer."""
    for param_group in optimizer.param_groups:
        param_group["lr"] = lr


class StepDecayScheduler:
    """
    Wraps an optimizer and decays its learning rate every `step_size` steps.

    Args:
        optimizer: The optimizer whose learning rate is managed.
        step_size: Steps between decays.
        gamma: Multiplicative decay factor.
        base_lr: Starting rate; defaults to the optimizer's current lr.
    """

    def __init__(
        self,
        optimizer: torch.optim.Optimizer,
        step_size: int = 1,
        gamma: float = 0.1,
        base_lr: float | None = None,
    ) -> None:
        if step_size < 1:
            raise ValueError(f"step_size must be >= 1, got {step_size}")
        self.optimizer = optimizer
        self.step_size = step_size
        self.gamma = gamma
        self.base_lr = base_lr if base_lr is not None else optimizer.param_groups[0]["lr"]
        self.step_count = 0
        set_learning_rate(optimizer, self.base_lr)

    @property
    def learning_rate(self) -> float:
        """The rate currently applied to the optimizer."""
        return get_learning_rate(self.step_count, self.base_lr, self.step_size, self.gamma)

    def step(self) -> float:
        """Advance one step, push the new rate into the optimizer and return it."""
        self.step_count += 1
        lr = self.learning_rate
        set_learning_rate(self.optimizer, lr)
        logger.debug("Learning rate updated", extra={"step": self.step_count, "lr": lr})
        return lr
