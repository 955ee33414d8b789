# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Embedding-bag text classifier.

Follows the PyTorch "text classification with torchtext" tutorial:
  EmbeddingBag (mean over each bag) → Linear → class scores

A batch is one flat tensor of token ids plus an offsets tensor that marks
where each example's tokens start, so variable-length texts need no padding.
"""

from typing import Optional

import torch
import torch.nn as nn

from ptexamples.model.init.weights import init_uniform
from ptexamples.model.interfaces import ClassifierBase

INIT_RANGE = 0.5


class TextClassificationModel(ClassifierBase):
    """
    Args:
        vocab_size: Number of rows in the embedding table.
        embed_dim: Embedding dimension.
        num_classes: Number of output categories.
        generator: Optional generator for the initial weight draw.
    """

    arity = 2

    def __init__(
        self,
        vocab_size: int,
        embed_dim: int,
        num_classes: int,
        generator: Optional[torch.Generator] = None,
    ) -> None:
        super().__init__(num_classes)
        self.embedding = nn.EmbeddingBag(vocab_size, embed_dim, mode="mean", sparse=False)
        self.fc = nn.Linear(embed_dim, num_classes)
        init_uniform(self, INIT_RANGE, generator=generator)

    def forward(self, *inputs: torch.Tensor) -> torch.Tensor:
        """
        Args:
            inputs: (token_ids, offsets). token_ids is a 1-D tensor of all
                tokens in the batch; offsets[i] is where example i starts.

        Returns:
            Scores of shape (num_examples, num_classes).
        """
        token_ids, offsets = inputs
        bags = self.embedding(token_ids, offsets)
        return self.fc(bags)
