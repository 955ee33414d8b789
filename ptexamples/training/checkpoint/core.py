# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Model weight persistence.

A weight file is `torch.save(model.state_dict())`: a mapping from layer
name (e.g. "embedding.weight", "fc.bias") to tensor. Saves are atomic: the
file is written into a temporary directory beside the target, then
renamed over the destination, so a crash never leaves a half-written file.

Loading is strict. Every saved name must exist in the model with the same
shape and every model parameter must be present in the file. Anything else
raises WeightLoadError before a single weight is overwritten.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Mapping, Optional

import torch
import torch.nn as nn

from ptexamples.errors import WeightLoadError
from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def metadata_path(weights_path: Path) -> Path:
    """Sidecar JSON file that describes a weight file."""
    return weights_path.with_suffix(weights_path.suffix + ".json")


def save_weights(
    model: nn.Module,
    weights_path: Path,
    metadata: Optional[Mapping[str, object]] = None,
) -> Path:
    """
    Save the model's state dict atomically.

    Args:
        model: The model whose weights are saved.
        weights_path: Destination file.
        metadata: Optional JSON-serializable description written next to it.

    Returns:
        The weights path.
    """
    parent = weights_path.parent
    parent.mkdir(parents=True, exist_ok=True)

    # torch.save needs a plain file name, so the temp file lives in its own dir
    tmp_dir = Path(tempfile.mkdtemp(dir=parent, prefix=".weights_tmp_"))
    try:
        state = {name: tensor.detach().cpu() for name, tensor in model.state_dict().items()}
        torch.save(state, tmp_dir / "model.pt")
        os.replace(tmp_dir / "model.pt", weights_path)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)

    if metadata is not None:
        metadata_path(weights_path).write_text(
            json.dumps(dict(metadata), indent=2, default=str),
            encoding="utf-8",
        )

    logger.info(
        "Weights saved",
        extra={"path": str(weights_path), "tensors": len(state)},
    )
    return weights_path


def _check_compatible(model: nn.Module, state: Mapping[str, torch.Tensor], source: str) -> None:
    expected = model.state_dict()

    missing = sorted(set(expected) - set(state))
    unexpected = sorted(set(state) - set(expected))
    mismatched = sorted(
        f"{name}: file {tuple(state[name].shape)} vs model {tuple(expected[name].shape)}"
        for name in set(expected) & set(state)
        if state[name].shape != expected[name].shape
    )

    problems = []
    if missing:
        problems.append(f"missing layers {missing}")
    if unexpected:
        problems.append(f"unexpected layers {unexpected}")
    if mismatched:
        problems.append(f"shape mismatches {mismatched}")
    if problems:
        raise WeightLoadError(f"Weight file {source} does not fit the model: " + "; ".join(problems))


def load_weights(
    model: nn.Module,
    weights_path: Path,
    device: Optional[torch.device] = None,
) -> nn.Module:
    """
    Load a weight file into `model`, matching strictly by layer name and shape.

    Raises:
        WeightLoadError: If the file is missing, unreadable, or does not fit.
    """
    if not weights_path.is_file():
        raise WeightLoadError(f"Weight file not found: {weights_path}")

    map_location = device if device is not None else "cpu"
    try:
        state = torch.load(weights_path, map_location=map_location, weights_only=True)
    except Exception as err:
        raise WeightLoadError(f"Cannot read weight file {weights_path}: {err}") from err

    if not isinstance(state, Mapping):
        raise WeightLoadError(
            f"Weight file {weights_path} holds {type(state).__name__}, expected a name→tensor mapping"
        )

    _check_compatible(model, state, str(weights_path))
    model.load_state_dict(state, strict=True)

    logger.info("Weights loaded", extra={"path": str(weights_path), "tensors": len(state)})
    return model


def read_metadata(weights_path: Path) -> dict[str, object]:
    """Metadata written next to a weight file, or {} when there is none."""
    path = metadata_path(weights_path)
    if not path.is_file():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))
