# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
AG_NEWS text classification example.

Based on the PyTorch tutorial "Text classification with the torchtext
library": an EmbeddingBag + Linear model trained with SGD (lr 5.0), gradient
clipping at 0.5, and the learning rate multiplied by 0.2 after every epoch.

Download train.csv and test.csv (for example from
https://github.com/mhjabreel/CharCnn_Keras/tree/master/data/ag_news_csv)
into the configured dataset directory.
"""

import logging
from pathlib import Path
from typing import Optional

import torch
import torch.nn as nn

from ptexamples.config.schema import TextClassificationConfig
from ptexamples.data.ag_news.batching import make_text_batches
from ptexamples.data.ag_news.reader import read_ag_news
from ptexamples.data.ag_news.vocab import build_vocab, load_vocab, save_vocab
from ptexamples.errors import WeightLoadError
from ptexamples.logging.logger import get_logger
from ptexamples.model.registry import build_model
from ptexamples.runtime.device import select_device
from ptexamples.training.checkpoint.core import load_weights
from ptexamples.training.engine.core import EvalResult, evaluate
from ptexamples.training.engine.driver import TrainingResult, run_epochs
from ptexamples.training.optimizer.core import create_optimizer
from ptexamples.training.scheduler.core import StepDecayScheduler

logger: logging.Logger = get_logger(__name__)

WEIGHTS_FILE = "ag_news.model.pt"
VOCAB_FILE = "vocab.json"


def run_text_classification(
    config: TextClassificationConfig,
    dataset_dir: Path,
    experiment_dir: Path,
    device: Optional[torch.device] = None,
) -> TrainingResult:
    """
    Build the vocabulary, train for `config.epochs` epochs and report test accuracy.

    Args:
        config: Text classification settings.
        dataset_dir: Folder holding train.csv and test.csv.
        experiment_dir: Where weights and vocabulary are written.
        device: Device to train on; the best available one by default.
    """
    device = device if device is not None else select_device()
    logger.info(
        "Running text classification",
        extra={"device": str(device), "epochs": config.epochs, "dataset_dir": str(dataset_dir)},
    )

    train_records = read_ag_news(dataset_dir, "train")
    test_records = read_ag_news(dataset_dir, "test")

    vocab = build_vocab((record.text for record in train_records), min_frequency=config.min_frequency)
    save_vocab(vocab, experiment_dir / VOCAB_FILE)

    model = build_model(
        "text_classification",
        vocab_size=vocab.get_vocab_size(),
        embed_dim=config.embed_dim,
        num_classes=config.num_classes,
    ).to(device)
    logger.info("Model created", extra={"parameters": model.count_parameters()})

    optimizer = create_optimizer(model, "sgd", config.learning_rate)
    scheduler = None
    if config.schedule.enabled:
        scheduler = StepDecayScheduler(
            optimizer,
            step_size=config.schedule.step_size,
            gamma=config.schedule.gamma,
        )

    train_batches = make_text_batches(train_records, vocab, config.batch_size, device)
    test_batches = make_text_batches(test_records, vocab, config.eval_batch_size, device)

    return run_epochs(
        model,
        optimizer,
        nn.CrossEntropyLoss(),
        train_batches,
        test_batches,
        config.epochs,
        device=device,
        scheduler=scheduler,
        grad_clip=config.grad_clip,
        log_interval=config.log_interval,
        timeout_seconds=config.timeout_seconds,
        weights_path=experiment_dir / WEIGHTS_FILE,
        weights_metadata={
            "model": "text_classification",
            "vocab_size": vocab.get_vocab_size(),
            "embed_dim": config.embed_dim,
            "num_classes": config.num_classes,
        },
    )


def evaluate_text_run(
    config: TextClassificationConfig,
    dataset_dir: Path,
    run_dir: Path,
    device: Optional[torch.device] = None,
) -> EvalResult:
    """
    Score the model saved by an earlier run on the test split, without training.

    The vocabulary is read back from the run so that test texts map to the
    same ids the model was trained on. embed_dim and num_classes must match
    the ones the run was trained with.

    Raises:
        WeightLoadError: If the run has no vocabulary or its weights do not fit.
    """
    device = device if device is not None else select_device()
    try:
        vocab = load_vocab(run_dir / VOCAB_FILE)
    except FileNotFoundError as err:
        raise WeightLoadError(f"Run directory {run_dir} has no {VOCAB_FILE}") from err

    model = build_model(
        "text_classification",
        vocab_size=vocab.get_vocab_size(),
        embed_dim=config.embed_dim,
        num_classes=config.num_classes,
    )
    load_weights(model, run_dir / WEIGHTS_FILE, device=device)
    model.to(device)

    test_records = read_ag_news(dataset_dir, "test")
    test_batches = make_text_batches(test_records, vocab, config.eval_batch_size, device)
    result = evaluate(model, nn.CrossEntropyLoss(), test_batches, device=device)

    logger.info(
        "Saved run evaluated",
        extra={"run_dir": str(run_dir), "examples": result.total, "accuracy": result.accuracy},
    )
    return result
