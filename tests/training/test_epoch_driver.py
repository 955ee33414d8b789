# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for run_epochs.

The wall clock is injected, so the timeout tests run instantly and
deterministically.
"""

import itertools
from pathlib import Path

import pytest
import torch
import torch.nn as nn

from ptexamples.data.batch import Batch
from ptexamples.model.linear import LinearClassifier
from ptexamples.training.checkpoint.core import load_weights, read_metadata
from ptexamples.training.engine.core import evaluate
from ptexamples.training.engine.driver import run_epochs
from ptexamples.training.scheduler.core import StepDecayScheduler


def _batches(count: int = 40, batch_size: int = 8) -> list[Batch]:
    generator = torch.Generator().manual_seed(0)
    features = torch.randn(count, 3, generator=generator)
    labels = (features[:, 0] > 0).long()
    return [
        Batch(inputs=(features[i : i + batch_size],), target=labels[i : i + batch_size])
        for i in range(0, count, batch_size)
    ]


def _setup(lr: float = 1.0) -> tuple[LinearClassifier, torch.optim.Optimizer]:
    model = LinearClassifier(3, 2, generator=torch.Generator().manual_seed(0))
    return model, torch.optim.SGD(model.parameters(), lr=lr)


def _ticking_clock(step: float) -> "itertools.count[float]":
    return itertools.count(0.0, step)


class TestEpochs:
    def test_runs_every_epoch_without_timeout(self) -> None:
        model, optimizer = _setup()
        result = run_epochs(model, optimizer, nn.CrossEntropyLoss(), _batches(), _batches(16), 3)

        assert result.epochs_completed == 3
        assert not result.timed_out
        assert len(result.history) == 3
        assert [stats.epoch for stats in result.history] == [1, 2, 3]
        assert result.test.total == 16

    def test_learning_rate_decays_once_per_epoch(self) -> None:
        model, optimizer = _setup(lr=1.0)
        scheduler = StepDecayScheduler(optimizer, step_size=1, gamma=0.5)

        result = run_epochs(
            model, optimizer, nn.CrossEntropyLoss(), _batches(), _batches(), 3, scheduler=scheduler
        )

        assert result.final_learning_rate == pytest.approx(0.125)

    def test_callable_source_is_called_once_per_epoch(self) -> None:
        calls: list[int] = []

        def train_data() -> list[Batch]:
            calls.append(1)
            return _batches()

        model, optimizer = _setup()
        run_epochs(model, optimizer, nn.CrossEntropyLoss(), train_data, _batches(), 4)

        assert len(calls) == 4

    def test_zero_epochs_is_rejected(self) -> None:
        model, optimizer = _setup()
        with pytest.raises(ValueError):
            run_epochs(model, optimizer, nn.CrossEntropyLoss(), _batches(), _batches(), 0)

    def test_accuracy_reported_for_held_out_data(self) -> None:
        model, optimizer = _setup()
        result = run_epochs(
            model, optimizer, nn.CrossEntropyLoss(), _batches(), _batches(), 2, evaluate_each_epoch=True
        )
        assert result.test_accuracy is not None
        assert 0.0 <= result.test_accuracy <= 1.0


class TestTimeout:
    def test_stops_after_first_epoch_past_timeout(self) -> None:
        model, optimizer = _setup()
        clock = _ticking_clock(10.0)

        result = run_epochs(
            model,
            optimizer,
            nn.CrossEntropyLoss(),
            _batches(),
            _batches(),
            5,
            timeout_seconds=5.0,
            clock=clock.__next__,
        )

        assert result.timed_out
        assert result.epochs_completed == 1
        assert result.test.total == 40

    def test_generous_timeout_runs_every_epoch(self) -> None:
        model, optimizer = _setup()
        clock = _ticking_clock(1.0)

        result = run_epochs(
            model,
            optimizer,
            nn.CrossEntropyLoss(),
            _batches(),
            _batches(),
            3,
            timeout_seconds=1_000.0,
            clock=clock.__next__,
        )

        assert not result.timed_out
        assert result.epochs_completed == 3

    def test_timeout_during_last_epoch_is_not_flagged(self) -> None:
        model, optimizer = _setup()
        clock = _ticking_clock(10.0)

        result = run_epochs(
            model,
            optimizer,
            nn.CrossEntropyLoss(),
            _batches(),
            _batches(),
            1,
            timeout_seconds=5.0,
            clock=clock.__next__,
        )

        assert not result.timed_out
        assert result.epochs_completed == 1


class TestWeights:
    def test_weights_saved_with_metadata(self, tmp_path: Path) -> None:
        model, optimizer = _setup()
        weights_path = tmp_path / "run" / "linear.model.pt"

        result = run_epochs(
            model,
            optimizer,
            nn.CrossEntropyLoss(),
            _batches(),
            _batches(),
            2,
            weights_path=weights_path,
            weights_metadata={"model": "linear"},
        )

        assert result.weights_path == str(weights_path)
        assert weights_path.is_file()
        assert read_metadata(weights_path) == {
            "model": "linear",
            "epochs_completed": 2,
            "timed_out": False,
        }

    def test_saved_weights_reload_to_the_same_scores(self, tmp_path: Path) -> None:
        model, optimizer = _setup()
        weights_path = tmp_path / "linear.model.pt"
        test_batches = _batches(16)

        result = run_epochs(
            model, optimizer, nn.CrossEntropyLoss(), _batches(), test_batches, 2, weights_path=weights_path
        )

        fresh = LinearClassifier(3, 2, generator=torch.Generator().manual_seed(5))
        load_weights(fresh, weights_path)
        reloaded = evaluate(fresh, nn.CrossEntropyLoss(), test_batches)
        assert reloaded.correct == result.test.correct
        assert reloaded.total_loss == pytest.approx(result.test.total_loss)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["linear.model.pt", "linear.model.pt.json"]

    def test_no_weights_path_skips_saving(self) -> None:
        model, optimizer = _setup()
        result = run_epochs(model, optimizer, nn.CrossEntropyLoss(), _batches(), _batches(), 1)
        assert result.weights_path is None
