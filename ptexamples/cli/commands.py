# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the ptexamples CLI.

Each function here corresponds to one subcommand and returns an exit code.
Setup (config, overrides, bootstrap) is shared; the heavy imports happen
inside the handlers so `--help` and `info` stay fast.

No print() calls. Everything goes through the structured logger.
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ptexamples.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from ptexamples.config.exceptions import ConfigError
from ptexamples.config.loader import load_config
from ptexamples.config.schema import (
    GlobalConfig,
    MnistConfig,
    PtExamplesConfig,
    TextClassificationConfig,
    default_config,
)
from ptexamples.errors import DatasetError, WeightLoadError
from ptexamples.logging.logger import get_logger
from ptexamples.runtime.bootstrap import bootstrap
from ptexamples.utils.paths import resolve_path, resolve_project_root


def _apply_global_overrides(config: PtExamplesConfig, args: argparse.Namespace) -> PtExamplesConfig:
    """
    Apply --seed and --log-level on top of the global section.

    Raises:
        ValidationError: If an override breaks a GlobalConfig constraint.
    """
    updates: dict[str, Any] = {}
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.log_level is not None:
        updates["log_level"] = args.log_level
    if not updates:
        return config
    global_config = GlobalConfig.model_validate({**config.global_config.model_dump(), **updates})
    return config.model_copy(update={"global_config": global_config})


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[PtExamplesConfig], logging.Logger, Path]:
    """
    The shared setup that every command needs: load config, apply overrides, bootstrap.

    Returns a tuple of (exit_code, config, logger, project_root). If exit_code
    is not SUCCESS, the caller should return it immediately.
    """
    logger = get_logger(f"ptexamples.cli.{command_name}", log_level=args.log_level or "INFO")
    project_root = resolve_project_root()

    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger, project_root
    else:
        logger.debug(
            "No config provided, running with defaults",
            extra={"command": command_name},
        )
        config = default_config()

    try:
        config = _apply_global_overrides(config, args)
    except ValidationError as err:
        logger.error(
            "Invalid command-line override",
            extra={"command": command_name, "error": str(err)},
        )
        return USER_ERROR, None, logger, project_root

    bootstrap(config.global_config, project_root)
    return SUCCESS, config, logger, project_root


def _override(section: BaseModel, updates: dict[str, Any]) -> Any:
    """Re-validate `section` with the non-None CLI values in `updates` applied."""
    values = section.model_dump()
    values.update({key: value for key, value in updates.items() if value is not None})
    return type(section).model_validate(values)


def _resolve_text_config(config: PtExamplesConfig, args: argparse.Namespace) -> TextClassificationConfig:
    base = config.text if config.text is not None else TextClassificationConfig()
    return _override(
        base,
        {
            "epochs": args.epochs,
            "batch_size": args.batch_size,
            "timeout_seconds": args.timeout,
            "dataset_directory": args.data_dir,
        },
    )


def _resolve_mnist_config(config: PtExamplesConfig, args: argparse.Namespace) -> MnistConfig:
    base = config.mnist if config.mnist is not None else MnistConfig()
    return _override(
        base,
        {
            "epochs": args.epochs,
            "train_batch_size": args.batch_size,
            "timeout_seconds": args.timeout,
            "dataset": args.dataset,
            "dataset_directory": args.data_dir,
        },
    )


def _experiments_root(config: PtExamplesConfig, project_root: Path) -> Path:
    return resolve_path(config.global_config.directories.experiments, project_root)


def _evaluate_text_run(
    text_cfg: TextClassificationConfig,
    dataset_dir: Path,
    run_dir: Path,
    logger: logging.Logger,
) -> int:
    try:
        from ptexamples.recipes.text_classification import evaluate_text_run

        result = evaluate_text_run(text_cfg, dataset_dir, run_dir)
        logger.info(
            "Evaluation complete",
            extra={"run_dir": str(run_dir), "test_accuracy": result.accuracy, "examples": result.total},
        )
        return SUCCESS
    except (DatasetError, WeightLoadError) as err:
        logger.error("Dataset or weights problem", extra={"command": "text", "error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Evaluation failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_text(args: argparse.Namespace) -> int:
    """Train and evaluate the AG_NEWS embedding-bag classifier, or score a saved run with --from-run."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "text")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        text_cfg = _resolve_text_config(config, args)
    except ValidationError as err:
        logger.error("Invalid command-line override", extra={"command": "text", "error": str(err)})
        return USER_ERROR

    dataset_dir = resolve_path(text_cfg.dataset_directory, project_root)

    if args.dry_run:
        logger.info(
            "Dry run, would train text classifier",
            extra={
                "epochs": text_cfg.epochs,
                "batch_size": text_cfg.batch_size,
                "dataset_dir": str(dataset_dir),
            },
        )
        return SUCCESS

    if args.from_run is not None:
        return _evaluate_text_run(text_cfg, dataset_dir, resolve_path(args.from_run, project_root), logger)

    try:
        from ptexamples.recipes.text_classification import run_text_classification
        from ptexamples.training.engine.experiment import create_experiment_dir

        full_config = config.model_copy(update={"text": text_cfg})
        experiment_dir = create_experiment_dir(
            _experiments_root(config, project_root), full_config, "text",
        )
        result = run_text_classification(text_cfg, dataset_dir, experiment_dir)

        logger.info(
            "Text classification complete",
            extra={
                "epochs_completed": result.epochs_completed,
                "test_accuracy": result.test_accuracy,
                "elapsed_s": round(result.elapsed_seconds, 1),
                "weights": result.weights_path,
            },
        )
        return SUCCESS

    except (DatasetError, WeightLoadError) as err:
        logger.error("Dataset or weights problem", extra={"command": "text", "error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("Text classification failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_mnist(args: argparse.Namespace) -> int:
    """Train and evaluate the convolutional MNIST / Fashion-MNIST classifier."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "mnist")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        mnist_cfg = _resolve_mnist_config(config, args)
    except ValidationError as err:
        logger.error("Invalid command-line override", extra={"command": "mnist", "error": str(err)})
        return USER_ERROR

    if mnist_cfg.dataset_directory is not None:
        dataset_dir = resolve_path(mnist_cfg.dataset_directory, project_root)
    else:
        data_root = resolve_path(config.global_config.directories.data, project_root)
        dataset_dir = data_root / mnist_cfg.dataset

    if args.dry_run:
        logger.info(
            "Dry run, would train MNIST classifier",
            extra={
                "dataset": mnist_cfg.dataset,
                "epochs": mnist_cfg.epochs,
                "dataset_dir": str(dataset_dir),
            },
        )
        return SUCCESS

    try:
        from ptexamples.recipes.mnist import run_mnist
        from ptexamples.training.engine.experiment import create_experiment_dir

        full_config = config.model_copy(update={"mnist": mnist_cfg})
        experiment_dir = create_experiment_dir(
            _experiments_root(config, project_root), full_config, "mnist",
        )
        result = run_mnist(
            mnist_cfg, dataset_dir, experiment_dir, seed=config.global_config.seed,
        )

        logger.info(
            "MNIST complete",
            extra={
                "epochs_completed": result.epochs_completed,
                "timed_out": result.timed_out,
                "test_accuracy": result.test_accuracy,
                "elapsed_s": round(result.elapsed_seconds, 1),
                "weights": result.weights_path,
            },
        )
        return SUCCESS

    except (DatasetError, WeightLoadError) as err:
        logger.error("Dataset or weights problem", extra={"command": "mnist", "error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        logger.error("MNIST failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_info(args: argparse.Namespace) -> int:
    """Display environment, registered models and effective config."""
    exit_code, config, logger, project_root = _load_and_bootstrap(args, "info")
    if exit_code != SUCCESS or config is None:
        return exit_code

    try:
        from ptexamples.model.registry import list_model_types
        from ptexamples.runtime.environment import get_system_info

        system_info = get_system_info()
        logger.info(
            "Environment",
            extra={
                **system_info._asdict(),
                "project_root": str(project_root),
                "models": list_model_types(),
                "config": config.model_dump(by_alias=True),
            },
        )
        return SUCCESS
    except Exception as err:
        logger.error("Info failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR
