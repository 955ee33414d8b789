# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for ptexamples.

One-time setup that runs before an example does any real work:
  1. Validate the environment (Python version)
  2. Set deterministic seeds
  3. Initialize the logger and apply the configured level
  4. Ensure the project directories exist

After bootstrap completes, the process is in a known, deterministic state.
"""

from pathlib import Path

from ptexamples.config.schema import GlobalConfig
from ptexamples.logging.logger import get_logger, set_log_level
from ptexamples.runtime.environment import check_minimum_python, get_system_info
from ptexamples.runtime.rng import set_seed
from ptexamples.utils.paths import ensure_directory, resolve_path


def _ensure_project_directories(project_root: Path, config: GlobalConfig) -> None:
    """Create the standard project directories if they don't exist."""
    dirs = config.directories
    ensure_directory(resolve_path(dirs.data, project_root))
    ensure_directory(resolve_path(dirs.logs, project_root))
    ensure_directory(resolve_path(dirs.experiments, project_root))


def bootstrap(config: GlobalConfig, project_root: Path) -> None:
    """
    Run the full bootstrap sequence.

    Args:
        config: The validated global configuration.
        project_root: Directory that relative config paths are anchored at.
    """
    check_minimum_python()
    set_seed(config.seed)

    log_file = None
    if config.log_file is not None:
        log_file = resolve_path(config.log_file, project_root)

    set_log_level(config.log_level)
    logger = get_logger("ptexamples.runtime", log_level=config.log_level, log_file=log_file)

    system_info = get_system_info()
    logger.info(
        "Bootstrap complete",
        extra={
            "seed": config.seed,
            "python_version": system_info.python_version,
            "torch_version": system_info.torch_version,
            "cuda_available": system_info.cuda_available,
            "platform": system_info.platform,
        },
    )

    _ensure_project_directories(project_root, config)
