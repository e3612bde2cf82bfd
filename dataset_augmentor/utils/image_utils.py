"""
A collection of standalone utility functions for image decoding and encoding.
Every image handed to the rest of the engine is an RGBA uint8 NumPy array
of shape (height, width, 4).
"""
from pathlib import Path

import cv2
import imageio.v2 as iio
import numpy as np
import tifffile as tiff

from dataset_augmentor.config import SETTINGS
from dataset_augmentor.errors import CodecError
from dataset_augmentor.utils.file_utils import create_dir_if_not_exists


def read_rgba_safe(path: Path) -> np.ndarray:
    """Safely reads an image and converts it to RGBA uint8."""
    # DEV: tifffile для TIFF и OpenCV для всего остального, как и раньше.
    # Pillow не используем, чтобы избежать DecompressionBomb на больших кадрах.
    if not path.exists():
        raise CodecError(f"Image file not found at: {path}")

    ext = path.suffix.lower()
    try:
        if ext in SETTINGS.DISCOVERY.TIFF_EXTENSIONS:
            arr = tiff.imread(str(path))
            channel_order = "rgb"
        else:
            # Using imdecode to be robust with non-ASCII paths
            data = np.fromfile(str(path), dtype=np.uint8)
            arr = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
            channel_order = "bgr"
    except (OSError, ValueError, cv2.error) as e:
        raise CodecError(f"Failed to read image file {path}: {e}") from e

    if arr is None:
        raise CodecError(f"Failed to read or decode image file: {path}")

    try:
        return to_rgba(to_uint8(arr), channel_order)
    except ValueError as e:
        raise CodecError(f"Unsupported image layout in {path}: {e}") from e


def to_uint8(arr: np.ndarray) -> np.ndarray:
    """Converts a NumPy array to uint8 without stretching its histogram."""
    if arr.dtype == np.uint8:
        return arr
    if arr.dtype == np.uint16:
        # Keep the high byte: 65535 -> 255, 257 -> 1
        return (arr // (SETTINGS.IMAGE.UINT16_MAX // SETTINGS.IMAGE.UINT8_MAX)).astype(np.uint8)
    if arr.dtype == np.bool_:
        return arr.astype(np.uint8) * SETTINGS.IMAGE.UINT8_MAX

    arr_f32 = arr.astype(np.float32)
    if np.issubdtype(arr.dtype, np.floating) and arr_f32.size and arr_f32.max() <= 1.0:
        arr_f32 = arr_f32 * SETTINGS.IMAGE.UINT8_MAX
    return np.clip(np.rint(arr_f32), 0, SETTINGS.IMAGE.UINT8_MAX).astype(np.uint8)


def to_rgba(arr: np.ndarray, channel_order: str = "bgr") -> np.ndarray:
    """Expands grayscale / 3-channel / 4-channel uint8 arrays into RGBA."""
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]

    if arr.ndim == 2:
        return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)

    if arr.ndim != 3:
        raise ValueError(f"expected a 2D or 3D array, got {arr.ndim} dimensions")

    channels = arr.shape[2]
    if channels == 3:
        code = cv2.COLOR_BGR2RGBA if channel_order == "bgr" else cv2.COLOR_RGB2RGBA
        return cv2.cvtColor(arr, code)
    if channels == 4:
        if channel_order == "bgr":
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        return np.ascontiguousarray(arr)
    raise ValueError(f"unsupported number of channels: {channels}")


def save_png_rgba(path: Path, image: np.ndarray) -> None:
    """Saves an RGBA uint8 array as a PNG image."""
    try:
        create_dir_if_not_exists(path.parent)
        if image.dtype != np.uint8:
            image = image.astype(np.uint8)
        iio.imwrite(str(path), image)
    except (OSError, ValueError) as e:
        raise CodecError(f"Failed to save image to {path}: {e}") from e


def save_tiff_rgba(path: Path, image: np.ndarray) -> None:
    """Saves an RGBA uint8 array as a TIFF image with an unassociated alpha channel."""
    try:
        create_dir_if_not_exists(path.parent)
        # DEV: extrasamples=2 - "unassociated alpha", иначе читалки считают 4-й канал мусором.
        tiff.imwrite(str(path), image, photometric="rgb", extrasamples=(2,))
    except (OSError, ValueError) as e:
        raise CodecError(f"Failed to save image to {path}: {e}") from e


def save_rgba(path: Path, image: np.ndarray) -> None:
    """Saves an RGBA image in the format given by the file extension."""
    ext = path.suffix.lower()
    if ext in SETTINGS.DISCOVERY.TIFF_EXTENSIONS:
        save_tiff_rgba(path, image)
    elif ext == SETTINGS.OUTPUT.EXT:
        save_png_rgba(path, image)
    else:
        raise CodecError(f"Format '{ext}' cannot store an alpha channel: {path}")
