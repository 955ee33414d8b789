# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Convolutional MNIST / Fashion-MNIST example.

Trains MnistModel with Adam and NLL loss, evaluates on the test split after
every epoch, and multiplies the learning rate by 0.7 per epoch. On CUDA the
batch sizes are scaled up by `cuda_batch_multiplier`.

Fashion-MNIST uses the same file names and format as MNIST but is harder to
fit. Place the four .gz files of either dataset in one folder.
"""

import logging
from pathlib import Path
from typing import Optional

import torch
import torch.nn as nn

from ptexamples.config.schema import MnistConfig
from ptexamples.data.batch import Batch
from ptexamples.data.mnist.batching import make_image_batches
from ptexamples.data.mnist.reader import read_mnist
from ptexamples.logging.logger import get_logger
from ptexamples.model.registry import build_model
from ptexamples.runtime.device import select_device
from ptexamples.runtime.rng import make_generator
from ptexamples.training.engine.driver import TrainingResult, run_epochs
from ptexamples.training.optimizer.core import create_optimizer
from ptexamples.training.scheduler.core import StepDecayScheduler

logger: logging.Logger = get_logger(__name__)


def weights_file(config: MnistConfig) -> str:
    return f"{config.dataset}.model.pt"


def run_mnist(
    config: MnistConfig,
    dataset_dir: Path,
    experiment_dir: Path,
    seed: int,
    device: Optional[torch.device] = None,
) -> TrainingResult:
    """
    Train and evaluate the convolutional model.

    Args:
        config: MNIST settings.
        dataset_dir: Folder holding the four IDX files.
        experiment_dir: Where the weights are written.
        seed: Seed for the shuffling generator.
        device: Device to train on; the best available one by default.
    """
    device = device if device is not None else select_device()

    train_batch_size = config.train_batch_size
    test_batch_size = config.test_batch_size
    if device.type == "cuda":
        train_batch_size *= config.cuda_batch_multiplier
        test_batch_size *= config.cuda_batch_multiplier

    logger.info(
        "Running MNIST",
        extra={
            "dataset": config.dataset,
            "device": str(device),
            "epochs": config.epochs,
            "timeout_s": config.timeout_seconds,
            "train_batch_size": train_batch_size,
            "test_batch_size": test_batch_size,
        },
    )

    train_set = read_mnist(dataset_dir, "train", config.normalize_mean, config.normalize_std)
    test_set = read_mnist(dataset_dir, "test", config.normalize_mean, config.normalize_std)

    model = build_model("mnist").to(device)
    logger.info("Model created", extra={"parameters": model.count_parameters()})

    optimizer = create_optimizer(model, config.optimizer, config.learning_rate)
    scheduler = None
    if config.schedule.enabled:
        scheduler = StepDecayScheduler(
            optimizer,
            step_size=config.schedule.step_size,
            gamma=config.schedule.gamma,
        )

    generator = make_generator(seed)

    def train_batches() -> list[Batch]:
        return make_image_batches(
            train_set,
            train_batch_size,
            device=device,
            generator=generator,
            shuffle=config.shuffle,
        )

    test_batches = make_image_batches(test_set, test_batch_size, device=device)

    return run_epochs(
        model,
        optimizer,
        nn.NLLLoss(reduction="mean"),
        train_batches,
        test_batches,
        config.epochs,
        device=device,
        eval_loss_fn=nn.NLLLoss(reduction="sum"),
        scheduler=scheduler,
        grad_clip=config.grad_clip,
        log_interval=config.log_interval,
        timeout_seconds=config.timeout_seconds,
        evaluate_each_epoch=True,
        weights_path=experiment_dir / weights_file(config),
        weights_metadata={"model": "mnist", "dataset": config.dataset},
    )
