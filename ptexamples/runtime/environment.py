# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Environment checks for ptexamples.

Fails fast on an unsupported interpreter and reports what torch can see
(version, CUDA, device count) for the `info` command and the startup log.
"""

import platform
import sys
from typing import NamedTuple

import torch

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 10


class SystemInfo(NamedTuple):
    """Snapshot of the current system environment."""

    python_version: str
    platform: str
    architecture: str
    torch_version: str
    cuda_available: bool
    cuda_device_count: int


def get_python_version() -> tuple[int, int, int]:
    """Return the current Python version as a (major, minor, micro) tuple."""
    return sys.version_info[:3]


def check_minimum_python() -> None:
    """
    Verify we're running a supported Python.

    Raises:
        RuntimeError: If the interpreter is older than the minimum.
    """
    major, minor, _ = get_python_version()
    if major < MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor < MINIMUM_PYTHON_MINOR
    ):
        raise RuntimeError(
            f"ptexamples requires Python >= {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}, "
            f"but you're running {major}.{minor}. Please upgrade."
        )


def get_system_info() -> SystemInfo:
    """Collect basic system and torch information for logging and diagnostics."""
    cuda_available = torch.cuda.is_available()
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        torch_version=torch.__version__,
        cuda_available=cuda_available,
        cuda_device_count=torch.cuda.device_count() if cuda_available else 0,
    )
