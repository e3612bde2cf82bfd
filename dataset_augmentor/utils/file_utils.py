"""
Utility functions for file system operations.
"""
from pathlib import Path
from typing import List

from dataset_augmentor.config import SETTINGS
from dataset_augmentor.errors import SetupIoError


def create_dir_if_not_exists(path: Path) -> None:
    """Creates a directory including parent directories if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)


def is_supported_image(path: Path) -> bool:
    """True if the file extension is one of the supported input formats."""
    return path.suffix.lower() in SETTINGS.DISCOVERY.SUPPORTED_EXTENSIONS


def collect_image_paths(input_root: Path) -> List[Path]:
    """
    Recursively finds every supported image under `input_root`.

    Returns:
        A path-sorted list, so that the same directory always yields the same order.

    Raises:
        SetupIoError: If the directory does not exist or cannot be read.
    """
    if not input_root.is_dir():
        raise SetupIoError(f"Input directory does not exist: {input_root}")

    try:
        # DEV: rglob сам обходит подкаталоги; сортируем, чтобы порядок не зависел от ФС.
        paths = [p for p in input_root.rglob('*') if p.is_file() and is_supported_image(p)]
    except OSError as e:
        raise SetupIoError(f"Failed to enumerate input files under {input_root}: {e}") from e

    return sorted(paths)
