# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for device helpers and TensorScope.

TensorScope must drop its references on exit, both on the normal path and
when an exception escapes the block.
"""

import weakref

import pytest
import torch

from ptexamples.errors import DeviceMismatchError
from ptexamples.runtime.device import (
    TensorScope,
    ensure_same_device,
    memory_usage_mb,
    select_device,
)


class TestTensorScope:
    def test_tracked_tensors_are_released_on_exit(self) -> None:
        tensor = torch.ones(16)
        ref = weakref.ref(tensor)

        with TensorScope() as scope:
            scope.track(tensor)
            del tensor
            assert len(scope) == 1
            assert ref() is not None

        assert len(scope) == 0
        assert ref() is None

    def test_released_when_block_raises(self) -> None:
        scope = TensorScope()
        with pytest.raises(RuntimeError, match="boom"):
            with scope:
                scope.track(torch.zeros(2))
                raise RuntimeError("boom")
        assert len(scope) == 0

    def test_track_returns_the_tensor(self) -> None:
        tensor = torch.zeros(2)
        with TensorScope() as scope:
            assert scope.track(tensor) is tensor

    def test_track_after_release_raises(self) -> None:
        scope = TensorScope()
        scope.release()
        with pytest.raises(RuntimeError, match="already released"):
            scope.track(torch.zeros(1))

    def test_release_twice_is_harmless(self) -> None:
        scope = TensorScope(torch.device("cpu"), empty_cache=True)
        scope.release()
        scope.release()
        assert len(scope) == 0


class TestDevices:
    def test_select_device(self) -> None:
        assert select_device().type in ("cpu", "cuda")

    def test_same_device_is_returned(self) -> None:
        assert ensure_same_device(torch.zeros(1), torch.ones(2)) == torch.device("cpu")

    def test_mismatch_raises(self) -> None:
        with pytest.raises(DeviceMismatchError):
            ensure_same_device(torch.zeros(1), torch.empty(1, device="meta"))

    def test_no_tensors_raises(self) -> None:
        with pytest.raises(ValueError):
            ensure_same_device()

    def test_cpu_memory_reports_zero(self) -> None:
        assert memory_usage_mb(torch.device("cpu")) == 0.0
