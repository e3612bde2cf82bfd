#dataset_augmentor/preparers/format_preparer.py

"""
A preparer that rewrites every image of a folder in place as RGBA, so that
later stages see one pixel layout regardless of how the files were saved.
"""
from pathlib import Path

from tqdm import tqdm

from dataset_augmentor.errors import CodecError
from dataset_augmentor.utils import image_utils
from dataset_augmentor.utils.file_utils import collect_image_paths


def convert_to_rgba(root: Path) -> int:
    """
    Re-encodes every supported image under `root` as 8-bit RGBA, keeping its
    path and format. Files that cannot be decoded, or whose format has no
    alpha channel (JPEG, BMP), are left untouched with a warning.

    Returns:
        The number of files rewritten.
    """
    converted = 0
    for path in tqdm(collect_image_paths(root), desc="Converting to RGBA"):
        try:
            image = image_utils.read_rgba_safe(path)
            image_utils.save_rgba(path, image)
        except CodecError as e:
            print(f"\n[WARNING] Leaving '{path}' as is: {e}")
            continue
        converted += 1

    print(f"Converted {converted} files to RGBA under: {root}")
    return converted
