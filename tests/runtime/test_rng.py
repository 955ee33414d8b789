# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for seeding and explicit generators.

Same seed must mean same numbers, and a private generator must not disturb
the process-wide stream.
"""

import random

import pytest
import torch

from ptexamples.runtime.rng import get_seed, make_generator, set_seed


@pytest.fixture(autouse=True)
def _restore_hash_seed(monkeypatch: pytest.MonkeyPatch) -> None:
    """set_seed writes PYTHONHASHSEED; monkeypatch puts the old value back."""
    monkeypatch.setenv("PYTHONHASHSEED", "0")


class TestSetSeed:
    def test_same_seed_same_tensors(self) -> None:
        set_seed(7)
        first = torch.rand(5)
        set_seed(7)
        second = torch.rand(5)
        assert torch.equal(first, second)

    def test_python_random_is_seeded(self) -> None:
        set_seed(7)
        first = [random.random() for _ in range(3)]
        set_seed(7)
        assert [random.random() for _ in range(3)] == first

    def test_get_seed_reports_last_seed(self) -> None:
        set_seed(1234)
        assert get_seed() == 1234

    def test_negative_seed_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            set_seed(-1)


class TestMakeGenerator:
    def test_same_seed_same_permutation(self) -> None:
        first = torch.randperm(20, generator=make_generator(3))
        second = torch.randperm(20, generator=make_generator(3))
        assert torch.equal(first, second)

    def test_private_generator_leaves_global_stream_alone(self) -> None:
        set_seed(1)
        expected = torch.rand(3)

        set_seed(1)
        torch.rand(10, generator=make_generator(5))
        assert torch.equal(torch.rand(3), expected)
