# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Model type registry for ptexamples.

Maps a config-level name to the classifier class that implements it, so
recipes and tests build models by name. Populated once at import time by
``_register_builtins()``; registering a name twice is an error.
"""

import logging
from typing import Any

from ptexamples.logging.logger import get_logger
from ptexamples.model.interfaces import ClassifierBase

logger: logging.Logger = get_logger(__name__)

_MODEL_REGISTRY: dict[str, type[ClassifierBase]] = {}


def register_model(name: str, cls: type[ClassifierBase]) -> None:
    """
    Register a classifier class under a unique name.

    Raises:
        ValueError: If ``name`` is already registered.
        TypeError: If ``cls`` does not implement ClassifierBase.
    """
    if name in _MODEL_REGISTRY:
        raise ValueError(
            f"Model type '{name}' is already registered to {_MODEL_REGISTRY[name].__name__}"
        )
    if not (isinstance(cls, type) and issubclass(cls, ClassifierBase)):
        raise TypeError(f"Model type '{name}' must subclass ClassifierBase, got {cls!r}")
    _MODEL_REGISTRY[name] = cls
    logger.debug("Model registered", extra={"model_type": name, "model_class": cls.__name__})


def get_model(name: str) -> type[ClassifierBase]:
    """
    Retrieve a registered classifier class by name.

    Raises:
        KeyError: If ``name`` is not registered.
    """
    if name not in _MODEL_REGISTRY:
        available = sorted(_MODEL_REGISTRY.keys())
        raise KeyError(f"Unknown model type '{name}'. Available: {available}")
    return _MODEL_REGISTRY[name]


def build_model(name: str, **kwargs: Any) -> ClassifierBase:
    """Instantiate the model registered under ``name`` with ``kwargs``."""
    return get_model(name)(**kwargs)


def list_model_types() -> list[str]:
    """Return sorted list of all registered model type names."""
    return sorted(_MODEL_REGISTRY.keys())


_BUILTINS_REGISTERED: bool = False


def _register_builtins() -> None:
    """Register the example models that ship with the package. Idempotent."""
    global _BUILTINS_REGISTERED
    if _BUILTINS_REGISTERED:
        return

    from ptexamples.model.linear import LinearClassifier
    from ptexamples.model.mnist import MnistModel
    from ptexamples.model.text_classification import TextClassificationModel

    register_model("text_classification", TextClassificationModel)
    register_model("mnist", MnistModel)
    register_model("linear", LinearClassifier)

    _BUILTINS_REGISTERED = True
    logger.debug("Builtin models registered", extra={"model_types": list_model_types()})


_register_builtins()
