#dataset_augmentor/writers/png_writer.py

"""
A writer that saves every output as PNG:
- <output_base>.png            the re-encoded original
- <output_base>_<variant>.png  every augmented variant
"""
from pathlib import Path

import numpy as np

from dataset_augmentor.config import SETTINGS
from dataset_augmentor.utils import image_utils
from dataset_augmentor.writers.base_writer import BaseWriter


class PngWriter(BaseWriter):
    """Writes RGBA images as PNG files."""

    def __init__(self, ext: str = SETTINGS.OUTPUT.EXT):
        super().__init__()
        self.ext = ext

    def output_path(self, output_base: Path, variant: str | None = None) -> Path:
        # DEV: Собираем имя строкой, а не через with_suffix(): у стема вида
        # "scan.v2" with_suffix() отрезал бы ".v2".
        name = output_base.name if variant is None else f"{output_base.name}_{variant}"
        return output_base.parent / f"{name}{self.ext}"

    def write(self, image: np.ndarray, output_base: Path, variant: str | None = None) -> Path:
        path = self.output_path(output_base, variant)
        image_utils.save_png_rgba(path, image)
        return path
