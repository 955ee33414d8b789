# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config schema and YAML loader.

We test:
  1. Valid YAML loads into a frozen, correct config object
  2. Defaults reproduce the example programs' hyperparameters
  3. Missing required fields and unknown keys raise ConfigValidationError
  4. Broken YAML raises ConfigLoadError
"""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from ptexamples.config.exceptions import ConfigError, ConfigLoadError, ConfigValidationError
from ptexamples.config.loader import load_config
from ptexamples.config.schema import (
    MnistConfig,
    ScheduleConfig,
    TextClassificationConfig,
    default_config,
)

SHIPPED_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "examples.yaml"


class TestLoadValidConfig:
    def test_loads_minimal_valid_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.global_config.project_name == "ptexamples-test"
        assert config.global_config.seed == 42
        assert config.global_config.log_level == "DEBUG"

    def test_example_sections_default_to_none(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.text is None
        assert config.mnist is None

    def test_shipped_config_loads(self) -> None:
        config = load_config(SHIPPED_CONFIG)
        assert config.text is not None
        assert config.mnist is not None
        assert config.text.learning_rate == 5.0
        assert config.mnist.learning_rate == pytest.approx(1e-3)
        assert config.mnist.timeout_seconds == 3600

    def test_partial_section_keeps_other_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "partial.yaml"
        config_file.write_text(
            textwrap.dedent("""\
                global:
                  config_version: "1.0.0"
                mnist:
                  dataset: "fashion-mnist"
            """),
            encoding="utf-8",
        )
        config = load_config(config_file)
        assert config.mnist is not None
        assert config.mnist.dataset == "fashion-mnist"
        assert config.mnist.epochs == 4


class TestInvalidConfig:
    def test_missing_required_field(self, invalid_config_file: Path) -> None:
        with pytest.raises(ConfigValidationError):
            load_config(invalid_config_file)

    def test_unknown_key_is_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "extra.yaml"
        config_file.write_text(
            textwrap.dedent("""\
                global:
                  config_version: "1.0.0"
                text:
                  hidden_size: 12
            """),
            encoding="utf-8",
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_out_of_range_value_is_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "range.yaml"
        config_file.write_text(
            textwrap.dedent("""\
                global:
                  config_version: "1.0.0"
                text:
                  epochs: 0
            """),
            encoding="utf-8",
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_broken_yaml(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(broken_yaml_file)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            load_config(tmp_path / "absent.yaml")

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- one\n- two\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(config_file)

    def test_errors_share_a_base_class(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(broken_yaml_file)


class TestDefaults:
    def test_text_defaults(self) -> None:
        text = TextClassificationConfig()
        assert text.embed_dim == 200
        assert text.batch_size == 64
        assert text.learning_rate == 5.0
        assert text.grad_clip == 0.5
        assert text.epochs == 16
        assert text.schedule.gamma == 0.2
        assert text.timeout_seconds is None

    def test_mnist_defaults(self) -> None:
        mnist = MnistConfig()
        assert mnist.optimizer == "adam"
        assert mnist.learning_rate == pytest.approx(1e-3)
        assert mnist.train_batch_size == 64
        assert mnist.test_batch_size == 128
        assert mnist.schedule.gamma == 0.7
        assert mnist.timeout_seconds == 3600.0
        assert (mnist.normalize_mean, mnist.normalize_std) == (0.1307, 0.3081)

    def test_default_config_uses_seed_one(self) -> None:
        config = default_config()
        assert config.global_config.seed == 1
        assert config.text is None

    def test_configs_are_frozen(self) -> None:
        text = TextClassificationConfig()
        with pytest.raises(ValidationError):
            text.epochs = 3  # type: ignore[misc]

    def test_invalid_gamma_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ScheduleConfig(gamma=0.0)

    def test_schedule_has_no_default_gamma(self) -> None:
        with pytest.raises(ValidationError):
            ScheduleConfig(step_size=2)  # type: ignore[call-arg]

    def test_schedule_block_must_name_gamma(self, tmp_path: Path) -> None:
        config_file = tmp_path / "schedule.yaml"
        config_file.write_text(
            textwrap.dedent("""\
                global:
                  config_version: "1.0.0"
                mnist:
                  schedule:
                    step_size: 2
            """),
            encoding="utf-8",
        )
        with pytest.raises(ConfigValidationError, match="gamma"):
            load_config(config_file)

    def test_schedule_block_with_gamma_loads(self, tmp_path: Path) -> None:
        config_file = tmp_path / "schedule.yaml"
        config_file.write_text(
            textwrap.dedent("""\
                global:
                  config_version: "1.0.0"
                mnist:
                  schedule:
                    step_size: 2
                    gamma: 0.7
            """),
            encoding="utf-8",
        )
        mnist = load_config(config_file).mnist
        assert mnist is not None
        assert (mnist.schedule.step_size, mnist.schedule.gamma) == (2, 0.7)

    def test_unknown_log_level_is_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "level.yaml"
        config_file.write_text(
            'global:\n  config_version: "1.0.0"\n  log_level: "LOUD"\n', encoding="utf-8"
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)
