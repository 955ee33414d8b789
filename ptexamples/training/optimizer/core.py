# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Optimizer factory and a manual update step.

The text example trains with plain SGD (lr 5.0), the MNIST example with Adam
(lr 1e-3). Both come from torch.optim.

manual_sgd_step exists for loops that update weights by hand. A parameter
whose .grad is None (it took no part in the loss) is left alone for that
step; that is not an error.
"""

from typing import Iterable, Literal

import torch
import torch.nn as nn

OptimizerKind = Literal["sgd", "adam"]


def create_optimizer(
    model: nn.Module,
    kind: OptimizerKind,
    learning_rate: float,
) -> torch.optim.Optimizer:
    """
    Create an optimizer over the model's trainable parameters.

    Raises:
        ValueError: On an unknown optimizer kind.
    """
    params = [p for p in model.parameters() if p.requires_grad]
    if kind == "sgd":
        return torch.optim.SGD(params, lr=learning_rate)
    if kind == "adam":
        return torch.optim.Adam(params, lr=learning_rate)
    raise ValueError(f"Unknown optimizer kind '{kind}'. Expected 'sgd' or 'adam'")


def manual_sgd_step(parameters: Iterable[torch.Tensor], learning_rate: float) -> int:
    """
    p -= learning_rate * p.grad for every parameter that has a gradient.

    Returns:
        Number of parameters actually updated.
    """
    updated = 0
    with torch.no_grad():
        for param in parameters:
            if param.grad is None:
                continue
            param.sub_(param.grad, alpha=learning_rate)
            updated += 1
    return updated
