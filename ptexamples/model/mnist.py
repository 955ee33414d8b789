# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Convolutional classifier for 28x28 grayscale digits (MNIST, Fashion-MNIST).

  conv(1→32, 3x3) → ReLU → conv(32→64, 3x3) → ReLU → max-pool(2)
  → dropout(0.25) → flatten → linear(9216→128) → ReLU → dropout(0.5)
  → linear(128→10) → log-softmax

The output is log-probabilities, so it pairs with NLLLoss.
"""

import torch
import torch.nn as nn
import torch.nn.functional as F

from ptexamples.model.interfaces import ClassifierBase

IMAGE_SIZE = 28


class MnistModel(ClassifierBase):
    """Two conv layers and two linear layers; input shape (batch, 1, 28, 28)."""

    arity = 1

    def __init__(self, num_classes: int = 10) -> None:
        super().__init__(num_classes)
        self.conv1 = nn.Conv2d(1, 32, kernel_size=3)
        self.conv2 = nn.Conv2d(32, 64, kernel_size=3)
        self.dropout1 = nn.Dropout(0.25)
        self.dropout2 = nn.Dropout(0.5)
        # 28 → 26 → 24 after the convs, 12 after pooling
        self.fc1 = nn.Linear(64 * 12 * 12, 128)
        self.fc2 = nn.Linear(128, num_classes)

    def forward(self, *inputs: torch.Tensor) -> torch.Tensor:
        (x,) = inputs
        x = F.relu(self.conv1(x))
        x = F.relu(self.conv2(x))
        x = F.max_pool2d(x, 2)
        x = self.dropout1(x)
        x = torch.flatten(x, 1)
        x = F.relu(self.fc1(x))
        x = self.dropout2(x)
        x = self.fc2(x)
        return F.log_softmax(x, dim=1)
