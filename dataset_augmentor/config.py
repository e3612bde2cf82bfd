#dataset_augmentor/config.py
"""
Application-wide constants and settings, plus the validated run configuration.
Using Pydantic for type validation and clear structure.
"""
from pathlib import Path
from typing import List, Dict, Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from dataset_augmentor.errors import ConfigError

# DEV: Pydantic, а не dataclasses: типы валидируются автоматически, и
# конфиг из YAML проходит ту же проверку, что и константы ниже.

class ImageConstants(BaseModel):
    """Constants related to image properties and processing."""
    UINT16_MAX: int = 65535
    UINT8_MAX: int = 255
    CHANNELS: int = 4  # RGBA


class OutputSettings(BaseModel):
    """How output files are named and encoded."""
    EXT: str = ".png"
    SHIFTED_SUFFIX: str = "shifted"


class ExecutionSettings(BaseModel):
    """Tuning of the worker pool and the progress reporter."""
    CHUNK_SIZE: int = 8
    PROGRESS_POLL_INTERVAL: float = 0.1  # seconds
    # One CPU stays with the driving process
    RESERVED_CPUS: int = 1


class DiscoverySettings(BaseModel):
    """Which input files are picked up."""
    SUPPORTED_EXTENSIONS: List[str] = [".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff"]
    TIFF_EXTENSIONS: List[str] = [".tif", ".tiff"]


class AppSettings(BaseModel):
    """Main application settings container."""
    # DEV: Все глобальные "магические числа" живут здесь.
    IMAGE: ImageConstants = ImageConstants()
    OUTPUT: OutputSettings = OutputSettings()
    EXECUTION: ExecutionSettings = ExecutionSettings()
    DISCOVERY: DiscoverySettings = DiscoverySettings()


# Create a single, importable instance of the settings
SETTINGS = AppSettings()


class PreprocessConfig(BaseModel):
    """Optional dimension-grouping stage run before augmentation."""
    enabled: bool = False
    staging_root: str = "./cache/grouped"
    min_count: int | None = Field(default=None, ge=1)
    square_only: bool = False


class PairingConfig(BaseModel):
    """
    Optional stage that deletes files without a counterpart. `counterpart_root`
    holds the same images `scale_factor` times larger than the input.
    """
    enabled: bool = False
    counterpart_root: str | None = None
    scale_factor: int = Field(default=2, ge=1)

    @model_validator(mode="after")
    def _counterpart_is_set(self) -> "PairingConfig":
        if self.enabled and not (self.counterpart_root or "").strip():
            raise ValueError("counterpart_root must be set when pairing is enabled")
        return self


class ConversionConfig(BaseModel):
    """Optional stage that rewrites the input images in place as RGBA."""
    enabled: bool = False


class AugmentationConfig(BaseModel):
    """A single augmentation run as described in the YAML config."""
    input_root: str
    output_root: str
    transformations: List[str] = []
    seed: int = Field(default=0, ge=0, lt=2 ** 64)
    workers: int | None = Field(default=None, ge=1)
    preprocess: PreprocessConfig = PreprocessConfig()
    pairing: PairingConfig = PairingConfig()
    conversion: ConversionConfig = ConversionConfig()

    @field_validator("input_root", "output_root")
    @classmethod
    def _strip_directory(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("directory must not be empty")
        return value


def load_config(path: Path) -> AugmentationConfig:
    """
    Reads and validates a YAML run configuration.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or does not
                     describe a valid run.
    """
    if not path.is_file():
        raise ConfigError(f"Configuration file not found at: {path}")

    # Load the YAML configuration with UTF-8 encoding for safety
    with open(path, 'r', encoding='utf-8') as f:
        try:
            raw: Dict[str, Any] = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML file: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration root must be a mapping, got {type(raw).__name__}.")

    try:
        return AugmentationConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e
