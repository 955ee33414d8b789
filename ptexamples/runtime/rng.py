# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Random state management.

Two ways to get randomness:
  - The process-wide default generator, seeded with `set_seed` and queried
    with `get_seed`. Model initialization and dropout draw from it.
  - Explicit `torch.Generator` objects from `make_generator`. Data shuffling
    uses one of these so its stream does not depend on how many draws the
    model made from the global state.
"""

import os
import random
from typing import Optional

import torch


def set_seed(seed: int) -> None:
    """
    Lock down all process-wide sources of randomness to the given seed.

    This sets:
      - Python's random module seed
      - PYTHONHASHSEED environment variable (controls hash randomization)
      - PyTorch CPU and CUDA seeds
      - cuDNN deterministic mode when CUDA is present

    Args:
        seed: Integer seed value. Must be >= 0.
    """
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")

    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)

    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.deterministic = True  # type: ignore[attr-defined]
        torch.backends.cudnn.benchmark = False  # type: ignore[attr-defined]


def get_seed() -> int:
    """The seed the default torch generator was last seeded with."""
    return torch.initial_seed()


def make_generator(seed: int, device: Optional[torch.device] = None) -> torch.Generator:
    """Create an explicit generator on `device` (CPU by default), seeded with `seed`."""
    generator = torch.Generator(device=device if device is not None else "cpu")
    generator.manual_seed(seed)
    return generator
