"""
Unit tests for the YAML run configuration.
"""
import pytest

from dataset_augmentor.config import AugmentationConfig, load_config, SETTINGS
from dataset_augmentor.errors import ConfigError


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_valid_config_with_defaults(tmp_path):
    path = _write(tmp_path, "input_root: ./raw\noutput_root: ' ./out '\ntransformations: [hor_shift, flip]\n")

    config = load_config(path)

    assert config.input_root == "./raw"
    assert config.output_root == "./out"
    assert config.transformations == ["hor_shift", "flip"]
    assert config.seed == 0
    assert config.workers is None
    assert config.preprocess.enabled is False


def test_preprocess_section(tmp_path):
    path = _write(tmp_path, "input_root: a\noutput_root: b\nseed: 18446744073709551615\n"
                            "preprocess:\n  enabled: true\n  min_count: 2\n  square_only: true\n")
    config = load_config(path)
    assert config.seed == 2 ** 64 - 1
    assert config.preprocess.enabled
    assert config.preprocess.min_count == 2
    assert config.preprocess.square_only


@pytest.mark.parametrize("text", [
    "input_root: a\noutput_root: b\nseed: -1\n",
    "input_root: a\noutput_root: b\nseed: 18446744073709551616\n",
    "input_root: '   '\noutput_root: b\n",
    "input_root: a\n",
    "input_root: a\noutput_root: b\nworkers: 0\n",
])
def test_invalid_values_are_config_errors(tmp_path, text):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, text))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_broken_yaml(tmp_path):
    with pytest.raises(ConfigError, match="YAML"):
        load_config(_write(tmp_path, "input_root: [unclosed\n"))


def test_non_mapping_root(tmp_path):
    with pytest.raises(ConfigError, match="mapping"):
        load_config(_write(tmp_path, "- a\n- b\n"))


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        raise ConfigError("bad")


def test_settings_defaults():
    assert SETTINGS.EXECUTION.CHUNK_SIZE == 8
    assert SETTINGS.OUTPUT.EXT == ".png"
    assert AugmentationConfig(input_root="a", output_root="b").transformations == []


def test_pairing_needs_a_counterpart(tmp_path):
    with pytest.raises(ConfigError, match="counterpart_root"):
        load_config(_write(tmp_path, "input_root: a\noutput_root: b\npairing:\n  enabled: true\n"))


def test_pairing_and_conversion_sections(tmp_path):
    config = load_config(_write(tmp_path, "input_root: a\noutput_root: b\n"
                                          "pairing:\n  enabled: true\n  counterpart_root: c\n  scale_factor: 4\n"
                                          "conversion:\n  enabled: true\n"))
    assert config.pairing.counterpart_root == "c"
    assert config.pairing.scale_factor == 4
    assert config.conversion.enabled
