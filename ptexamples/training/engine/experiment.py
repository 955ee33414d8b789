# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Experiment directory setup.

Every run gets its own directory:
    experiments/<run_id>/
      ├── config.json         frozen config snapshot
      ├── <dataset>.model.pt  trained weights (+ .json metadata)
      └── vocab.json          text example only

run_id format: YYYYMMDD_HHMMSS_<example>_<seed>
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ptexamples.config.schema import PtExamplesConfig
from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def create_experiment_dir(
    experiments_root: Path,
    config: PtExamplesConfig,
    example: str,
) -> Path:
    """
    Create a new experiment directory and snapshot the config into it.

    Args:
        experiments_root: Root directory for experiments (e.g. experiments/).
        config: The full validated config, with CLI overrides applied.
        example: Short example name ("text", "mnist") used in the run id.

    Returns:
        Path to the created experiment directory.
    """
    seed = config.global_config.seed
    timestamp = datetime.now(tz=timezone.utc).strftime("%Y%m%d_%H%M%S")
    run_id = f"{timestamp}_{example}_{seed}"
    experiment_dir = experiments_root / run_id

    suffix = 1
    while experiment_dir.exists():
        suffix += 1
        experiment_dir = experiments_root / f"{run_id}_{suffix}"

    experiment_dir.mkdir(parents=True)

    config_snapshot = config.model_dump(by_alias=True)
    (experiment_dir / "config.json").write_text(
        json.dumps(config_snapshot, indent=2, default=str),
        encoding="utf-8",
    )

    logger.info(
        "Experiment directory created",
        extra={"run_id": experiment_dir.name, "path": str(experiment_dir)},
    )
    return experiment_dir
