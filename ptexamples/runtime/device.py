# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Device placement and native memory discipline.

Tensor storage lives outside the Python heap (and on CUDA there is no
virtual-memory backstop), so loop bodies do not leave intermediates for the
garbage collector. They register them with a TensorScope, which drops its
references on exit, on the normal path and when an exception escapes.
"""

import logging
from types import TracebackType
from typing import Optional

import torch

from ptexamples.errors import DeviceMismatchError
from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def select_device() -> torch.device:
    """Select the best available device."""
    if torch.cuda.is_available():
        return torch.device("cuda")
    return torch.device("cpu")


def ensure_same_device(*tensors: torch.Tensor) -> torch.device:
    """
    Return the shared device of `tensors`.

    Raises:
        DeviceMismatchError: If the tensors do not all live on one device.
        ValueError: If called with no tensors.
    """
    if not tensors:
        raise ValueError("ensure_same_device needs at least one tensor")

    device = tensors[0].device
    for tensor in tensors[1:]:
        if tensor.device != device:
            raise DeviceMismatchError(
                f"Cannot combine tensors on {device} and {tensor.device}"
            )
    return device


def memory_usage_mb(device: torch.device) -> float:
    """Native memory currently held by live tensors on `device`, in MB (0 on CPU)."""
    if device.type == "cuda":
        return torch.cuda.memory_allocated(device) / (1024 * 1024)
    return 0.0


def release_cached_memory(device: torch.device) -> None:
    """Hand cached-but-unused CUDA blocks back to the driver."""
    if device.type == "cuda":
        torch.cuda.empty_cache()


class TensorScope:
    """
    Scoped ownership of intermediate tensors.

    Usage:
        def step(batch, scope):
            logits = scope.track(model(*batch.inputs))
            loss = scope.track(loss_fn(logits, batch.target))
            ...

        with TensorScope(device) as scope:
            step(batch, scope)
        # step's frame is gone and the scope has let go: the tensors are freed

    release() only drops the scope's own references. A tensor still bound to
    a live name outside the scope survives it, which is why the training and
    evaluation loops create their intermediates inside a step function.

    Args:
        device: Device the tracked tensors live on.
        empty_cache: Also return cached CUDA blocks to the driver on exit.
            Slower, but keeps the memory footprint flat between iterations.
    """

    def __init__(self, device: Optional[torch.device] = None, empty_cache: bool = False) -> None:
        self.device = device
        self.empty_cache = empty_cache
        self._tensors: list[torch.Tensor] = []
        self._closed = False

    def track(self, tensor: torch.Tensor) -> torch.Tensor:
        """Register a tensor with the scope and hand it back."""
        if self._closed:
            raise RuntimeError("TensorScope is already released")
        self._tensors.append(tensor)
        return tensor

    def __len__(self) -> int:
        return len(self._tensors)

    def release(self) -> None:
        """Drop every tracked reference. Safe to call more than once."""
        self._tensors.clear()
        self._closed = True
        if self.empty_cache and self.device is not None:
            release_cached_memory(self.device)

    def __enter__(self) -> "TensorScope":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.release()
