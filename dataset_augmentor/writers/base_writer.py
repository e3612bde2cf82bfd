#dataset_augmentor/writers/base_writer.py

"""
Abstract base class for writers.
"""
from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np


class BaseWriter(ABC):
    """Defines the interface for writing augmented images to disk."""

    def __init__(self, **params):
        pass

    @abstractmethod
    def output_path(self, output_base: Path, variant: str | None = None) -> Path:
        """Where `write` puts the image for this base and variant."""
        pass

    @abstractmethod
    def write(self, image: np.ndarray, output_base: Path, variant: str | None = None) -> Path:
        """
        Saves one image next to the other outputs of the same source file.

        Args:
            image: RGBA uint8 image to save.
            output_base: Output path of the source file without extension.
            variant: Suffix of the variant, or None for the re-encoded original.

        Returns:
            The path the image was written to.
        """
        pass
