# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for ptexamples.

Each example gets its own frozen pydantic model. Frozen means a config cannot
be mutated once built. CLI overrides dump the section, apply the new values
and run `model_validate` again, so an override is held to the same
constraints as the file it replaces.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Defaults reproduce the hyperparameters of the original example programs.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

CONFIG_VERSION = "1.0.0"


class DirectoryConfig(BaseModel):
    """Paths to the standard project directories, all relative to project root."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    data: str = Field(default="data", description="Root directory for downloaded datasets")
    logs: str = Field(default="logs", description="System and debug logs")
    experiments: str = Field(default="experiments", description="Training run outputs")


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings that apply to every example.

    Controls reproducibility (seed), observability (log_level, log_file) and
    where outputs land.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(default="ptexamples", description="Human-readable identifier")
    seed: int = Field(
        default=1,
        ge=0,
        description="Global random seed; the original examples all seed with 1",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Verbosity of the JSON logs",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to project root",
    )
    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)


class ScheduleConfig(BaseModel):
    """
    Step-decay learning rate schedule: lr = base_lr * gamma ** (epoch // step_size).

    gamma has no shared default because the examples decay at different
    rates (0.2 for text, 0.7 for MNIST). An explicit `schedule:` block must
    name it; leaving the block out keeps the example's own rate.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    enabled: bool = Field(default=True, description="Step the schedule after every epoch")
    step_size: int = Field(default=1, ge=1, description="Epochs between decays")
    gamma: float = Field(gt=0.0, le=1.0, description="Multiplicative decay factor")


class TextClassificationConfig(BaseModel):
    """
    AG_NEWS embedding-bag text classification.

    The dataset folder must contain train.csv and test.csv in the AG_NEWS
    CSV layout.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(default=CONFIG_VERSION, description="Schema version")
    dataset_directory: str = Field(
        default="data/AG_NEWS",
        description="Folder holding train.csv and test.csv, relative to project root",
    )
    num_classes: int = Field(default=4, ge=2, description="AG_NEWS has four categories")
    embed_dim: int = Field(default=200, ge=1, description="Embedding-bag dimension")
    batch_size: int = Field(default=64, ge=1, description="Training batch size")
    eval_batch_size: int = Field(default=256, ge=1, description="Evaluation batch size")
    epochs: int = Field(default=16, ge=1, description="Number of training epochs")
    learning_rate: float = Field(default=5.0, gt=0.0, description="SGD learning rate")
    grad_clip: Optional[float] = Field(
        default=0.5,
        gt=0.0,
        description="Max gradient norm; null disables clipping",
    )
    log_interval: int = Field(default=200, ge=1, description="Log progress every N batches")
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Stop after the epoch during which this much wall-clock time elapsed",
    )
    min_frequency: int = Field(
        default=1,
        ge=1,
        description="Minimum occurrences for a word to enter the vocabulary",
    )
    schedule: ScheduleConfig = Field(default_factory=lambda: ScheduleConfig(gamma=0.2))


class MnistConfig(BaseModel):
    """
    Convolutional MNIST / Fashion-MNIST classification.

    The dataset folder must contain the four IDX .gz files with the standard
    MNIST file names (Fashion-MNIST uses the same names).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(default=CONFIG_VERSION, description="Schema version")
    dataset: str = Field(default="mnist", description="Dataset name, e.g. 'mnist' or 'fashion-mnist'")
    dataset_directory: Optional[str] = Field(
        default=None,
        description="Folder holding the IDX files; defaults to <data dir>/<dataset>",
    )
    train_batch_size: int = Field(default=64, ge=1, description="Training batch size")
    test_batch_size: int = Field(default=128, ge=1, description="Test batch size")
    cuda_batch_multiplier: int = Field(
        default=4,
        ge=1,
        description="Batch sizes are multiplied by this when training on CUDA",
    )
    epochs: int = Field(default=4, ge=1, description="Number of training epochs")
    optimizer: Literal["adam", "sgd"] = Field(default="adam", description="Optimizer kind")
    learning_rate: float = Field(default=1e-3, gt=0.0, description="Optimizer learning rate")
    grad_clip: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Max gradient norm; null disables clipping",
    )
    log_interval: int = Field(default=100, ge=1, description="Log progress every N batches")
    timeout_seconds: Optional[float] = Field(
        default=3600.0,
        gt=0.0,
        description="Stop after the epoch during which this much wall-clock time elapsed",
    )
    normalize_mean: float = Field(default=0.1307, description="Pixel normalization mean")
    normalize_std: float = Field(default=0.3081, gt=0.0, description="Pixel normalization std")
    shuffle: bool = Field(default=True, description="Shuffle training batches every epoch")
    schedule: ScheduleConfig = Field(default_factory=lambda: ScheduleConfig(gamma=0.7))


class PtExamplesConfig(BaseModel):
    """
    Top-level config container.

    A YAML file always carries `global:`; `text:` and `mnist:` are optional and
    fall back to the defaults above when the matching command runs without them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    text: Optional[TextClassificationConfig] = Field(default=None)
    mnist: Optional[MnistConfig] = Field(default=None)


def default_config() -> PtExamplesConfig:
    """The config used when a command runs without --config."""
    return PtExamplesConfig.model_validate({"global": {"config_version": CONFIG_VERSION}})
