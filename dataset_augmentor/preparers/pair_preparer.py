#dataset_augmentor/preparers/pair_preparer.py

"""
A preparer for paired datasets of one image set at two resolutions, e.g. a
16x texture pack and its 32x remake laid out as produced by the dimension
preparer:
- <low_root>/16x16/stone.png  <->  <high_root>/32x32/stone.png

Files without a counterpart on the other side are deleted from both folders.
"""
import re
from pathlib import Path
from typing import Dict, Set

from dataset_augmentor.errors import ConfigError, SetupIoError

# A "<W>x<H>" path component, as written by the dimension preparer
SIZE_FOLDER_PATTERN = re.compile(r"^(\d+)x(\d+)$")


def scale_size_folders(relative_path: Path, scale_factor: int, scale_up: bool) -> Path:
    """
    Rescales every `<W>x<H>` component of a relative path. Scaling down uses
    integer division. Other components are kept as they are.
    """
    parts = []
    for part in relative_path.parts:
        match = SIZE_FOLDER_PATTERN.match(part)
        if match:
            width, height = int(match.group(1)), int(match.group(2))
            if scale_up:
                width, height = width * scale_factor, height * scale_factor
            else:
                width, height = width // scale_factor, height // scale_factor
            part = f"{width}x{height}"
        parts.append(part)
    return Path(*parts)


def collect_relative_files(root: Path) -> Set[Path]:
    """Every file under `root` (any type), relative to `root`."""
    if not root.is_dir():
        raise SetupIoError(f"Directory does not exist: {root}")
    return {path.relative_to(root) for path in root.rglob('*') if path.is_file()}


def remove_empty_dirs(root: Path) -> int:
    """Removes empty subdirectories of `root`, deepest first. `root` itself stays."""
    # DEV: сортируем по глубине, чтобы папка, опустевшая после удаления
    # вложенных, тоже была удалена за один проход.
    subdirs = sorted((p for p in root.rglob('*') if p.is_dir()), key=lambda p: len(p.parts), reverse=True)
    removed = 0
    for directory in subdirs:
        if not any(directory.iterdir()):
            directory.rmdir()
            removed += 1
    return removed


def remove_unpaired_files(low_root: Path, high_root: Path, scale_factor: int) -> Dict[str, int]:
    """
    Keeps only the files present on both sides once their size folders are
    scaled: `<low_root>/WxH/f` pairs with `<high_root>/(W*k)x(H*k)/f`.
    Empty directories left behind are pruned.

    Args:
        low_root: Folder with the smaller images.
        high_root: Folder with the same images `scale_factor` times larger.
        scale_factor: Positive integer factor between the two resolutions.

    Returns:
        {"low": files removed from low_root, "high": files removed from high_root}.

    Raises:
        ConfigError: If `scale_factor` is not positive.
        SetupIoError: If either folder does not exist.
    """
    if scale_factor < 1:
        raise ConfigError(f"Scale factor must be a positive integer, got {scale_factor}.")

    low_files = collect_relative_files(low_root)
    high_files = collect_relative_files(high_root)

    paired_in_low = {scale_size_folders(p, scale_factor, scale_up=False) for p in high_files}
    paired_in_high = {scale_size_folders(p, scale_factor, scale_up=True) for p in low_files}

    low_unpaired = sorted(low_files - paired_in_low)
    high_unpaired = sorted(high_files - paired_in_high)

    for relative_path in low_unpaired:
        (low_root / relative_path).unlink()
    for relative_path in high_unpaired:
        (high_root / relative_path).unlink()

    remove_empty_dirs(low_root)
    remove_empty_dirs(high_root)

    print(f"Removed {len(low_unpaired)} unpaired files from {low_root} "
          f"and {len(high_unpaired)} from {high_root}.")
    return {"low": len(low_unpaired), "high": len(high_unpaired)}
