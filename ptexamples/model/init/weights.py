# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Weight initialization for the example models.

Weight matrices (embedding tables, linear and conv kernels) are drawn from
U(-init_range, init_range); biases start at zero. Passing a generator makes
the draw independent of the process-wide random state.
"""

from typing import Optional

import torch
import torch.nn as nn


def init_uniform(
    module: nn.Module,
    init_range: float = 0.5,
    generator: Optional[torch.Generator] = None,
) -> None:
    """
    Initialize all parameters of `module` in place.

    Args:
        module: The nn.Module to initialize.
        init_range: Half-width of the symmetric uniform range.
        generator: Optional explicit generator for the uniform draws.
    """
    with torch.no_grad():
        for name, param in module.named_parameters():
            if name.endswith("bias"):
                param.zero_()
            else:
                param.uniform_(-init_range, init_range, generator=generator)
