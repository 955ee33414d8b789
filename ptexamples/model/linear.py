# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Single linear layer classifier: [..., in_features] → [..., num_classes]."""

from typing import Optional

import torch
import torch.nn as nn

from ptexamples.model.init.weights import init_uniform
from ptexamples.model.interfaces import ClassifierBase


class LinearClassifier(ClassifierBase):
    arity = 1

    def __init__(
        self,
        in_features: int,
        num_classes: int,
        init_range: float = 0.5,
        generator: Optional[torch.Generator] = None,
    ) -> None:
        super().__init__(num_classes)
        self.fc = nn.Linear(in_features, num_classes)
        init_uniform(self, init_range, generator=generator)

    def forward(self, *inputs: torch.Tensor) -> torch.Tensor:
        (x,) = inputs
        return self.fc(x)
