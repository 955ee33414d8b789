# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Capability contract shared by every example model.

A model is anything that:
  - maps a fixed number of input tensors to a tensor of class scores,
    shape [..., num_classes] with the leading batch dims preserved
  - exposes its learnable weights through named_parameters()

Sub-layers are registered as attributes so torch's module registry tracks
them by name; that name is what weight files are keyed on.

The training loop calls models as `model(*batch.inputs)`. Each model
declares how many inputs it takes in `arity`, and __call__ rejects any other
count before forward() runs.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

import torch
import torch.nn as nn

from ptexamples.errors import UnsupportedArityError


class ClassifierBase(nn.Module, ABC):
    """
    Base class for all example classifiers.

    Contract:
        forward(*inputs) -> scores  where len(inputs) == arity
                                    and scores.shape[-1] == num_classes
    """

    arity: ClassVar[int] = 1

    def __init__(self, num_classes: int) -> None:
        super().__init__()
        self.num_classes = num_classes

    def __call__(self, *inputs: Any, **kwargs: Any) -> Any:
        if kwargs:
            raise UnsupportedArityError(type(self).__name__, self.arity, len(inputs) + len(kwargs))
        if len(inputs) != self.arity:
            raise UnsupportedArityError(type(self).__name__, self.arity, len(inputs))
        return super().__call__(*inputs)

    @abstractmethod
    def forward(self, *inputs: torch.Tensor) -> torch.Tensor:
        """Compute class scores of shape [..., num_classes]."""
        ...

    def count_parameters(self) -> int:
        """Number of trainable scalars."""
        return sum(p.numel() for p in self.parameters() if p.requires_grad)
