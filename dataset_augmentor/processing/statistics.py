"""
Per-image summary statistics used to adapt the sampling ranges of color operators.
"""
import cv2
import numpy as np
from pydantic import BaseModel, Field

from dataset_augmentor.config import SETTINGS

# Rec. 709 luma weights on sRGB-normalized channels
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)


class ImageStatistics(BaseModel):
    """Mean luma and mean HSL saturation of an image, both in [0, 1]."""
    mean_luma: float = Field(default=0.0, ge=0.0, le=1.0)
    mean_saturation: float = Field(default=0.0, ge=0.0, le=1.0)


def compute_statistics(image: np.ndarray) -> ImageStatistics:
    """
    Computes the mean luma and the mean HSL saturation over every pixel.
    A zero-pixel image yields the default statistics (0, 0).
    """
    if image.size == 0 or image.shape[0] == 0 or image.shape[1] == 0:
        return ImageStatistics()

    rgb = image[:, :, :3].astype(np.float32) / SETTINGS.IMAGE.UINT8_MAX

    luma = rgb @ LUMA_WEIGHTS
    # DEV: для float32 OpenCV отдает H в [0, 360), L и S в [0, 1] - это и есть HSL.
    hls = cv2.cvtColor(rgb, cv2.COLOR_RGB2HLS)
    saturation = np.clip(hls[:, :, 2], 0.0, 1.0)

    return ImageStatistics(
        mean_luma=float(np.clip(luma.mean(dtype=np.float64), 0.0, 1.0)),
        mean_saturation=float(np.clip(saturation.mean(dtype=np.float64), 0.0, 1.0)),
    )
