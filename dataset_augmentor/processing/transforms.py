#dataset_augmentor/processing/transforms.py

"""
Defines the transformation classes available to the augmentation pipeline.
Each class is a callable that takes an RGBA image and a seeded RNG and returns
a new RGBA image. Transforms hold no state between calls.
"""
import math
import random

import cv2
import numpy as np

from dataset_augmentor.config import SETTINGS
from dataset_augmentor.errors import OperatorError
from dataset_augmentor.processing.sampling import sample_triangular, enforce_minimum_effect, sample_shift
from dataset_augmentor.processing.statistics import compute_statistics, LUMA_WEIGHTS

# DEV: Трансформация никогда не меняет входной массив на месте: один и тот же
# "базовый" вариант подается на вход каждой one-time трансформации.


class BaseTransform:
    """Base class for all transformations."""

    def __init__(self, **kwargs):
        """
        Args:
            **kwargs: Optional parameters. Unknown ones are kept but ignored,
                      so that extra keys never break construction.
        """
        self.params = kwargs

    def __call__(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        """
        Applies the transformation.

        Args:
            image: RGBA uint8 array of shape (height, width, 4).
            rng: A `random.Random` seeded for this (file, transform) pair.

        Returns:
            A new RGBA uint8 array.

        Raises:
            OperatorError: If the image has the wrong layout or the operation fails.
        """
        if image.ndim != 3 or image.shape[2] != SETTINGS.IMAGE.CHANNELS or image.dtype != np.uint8:
            raise OperatorError(f"{type(self).__name__} expects an RGBA uint8 image, "
                                f"got shape {image.shape} and dtype {image.dtype}")
        try:
            return self.apply(image, rng)
        except (ValueError, cv2.error) as e:
            raise OperatorError(f"{type(self).__name__} failed: {e}") from e

    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        raise NotImplementedError("Each transform must implement the `apply` method.")


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _with_rgb(image: np.ndarray, rgb: np.ndarray) -> np.ndarray:
    """Recombines new color channels (any numeric dtype) with the original alpha."""
    out = np.empty_like(image)
    out[:, :, :3] = np.clip(np.rint(rgb), 0, SETTINGS.IMAGE.UINT8_MAX).astype(np.uint8)
    out[:, :, 3] = image[:, :, 3]
    return out


# --- Move ---

def shift_image(image: np.ndarray, shift: int, axis: int) -> np.ndarray:
    """
    Cyclically moves every pixel to (position + shift) mod dimension along `axis`
    (1 = horizontal, 0 = vertical). Shifting by d and then by dimension - d
    restores the original exactly.
    """
    return np.roll(image, shift, axis=axis)


class HorizontalShift(BaseTransform):
    """Cyclic shift along the x axis by 10-30% of the width (or its complement)."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        shift = sample_shift(rng, image.shape[1])
        return shift_image(image, shift, axis=1)


class VerticalShift(BaseTransform):
    """Cyclic shift along the y axis by 10-30% of the height (or its complement)."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        shift = sample_shift(rng, image.shape[0])
        return shift_image(image, shift, axis=0)


# --- Rotate / Flip ---

class Rotate90(BaseTransform):
    """Rotates clockwise by 90 degrees."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        return cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE)


class Rotate180(BaseTransform):
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        return cv2.rotate(image, cv2.ROTATE_180)


class Rotate270(BaseTransform):
    """Rotates clockwise by 270 degrees."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        return cv2.rotate(image, cv2.ROTATE_90_COUNTERCLOCKWISE)


class Mirror(BaseTransform):
    """Horizontal flip (left <-> right)."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        return cv2.flip(image, 1)


class Flip(BaseTransform):
    """Vertical flip (top <-> bottom)."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        return cv2.flip(image, 0)


# --- Colors ---

def hue_rotation_matrix(degrees: float) -> np.ndarray:
    """Luminance-preserving RGB hue rotation matrix (the same one CSS `hue-rotate` uses)."""
    rad = math.radians(degrees)
    cosv, sinv = math.cos(rad), math.sin(rad)
    return np.array([
        [0.213 + cosv * 0.787 - sinv * 0.213, 0.715 - cosv * 0.715 - sinv * 0.715, 0.072 - cosv * 0.072 + sinv * 0.928],
        [0.213 - cosv * 0.213 + sinv * 0.143, 0.715 + cosv * 0.285 + sinv * 0.140, 0.072 - cosv * 0.072 - sinv * 0.283],
        [0.213 - cosv * 0.213 - sinv * 0.787, 0.715 - cosv * 0.715 + sinv * 0.715, 0.072 + cosv * 0.928 + sinv * 0.072],
    ], dtype=np.float64)


class HueRotate(BaseTransform):
    """
    Rotates the hue by an angle drawn from triangular(-60, 0, 60) degrees.
    Angles below 10 degrees are pushed out to exactly +/-10.
    """
    MAX_DEGREES = 60.0
    MIN_DEGREES = 10.0

    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        degrees = sample_triangular(rng, -self.MAX_DEGREES, 0.0, self.MAX_DEGREES)
        degrees = enforce_minimum_effect(rng, degrees, self.MIN_DEGREES)
        degrees = _round_half_away(degrees)
        return self.rotate(image, degrees)

    @staticmethod
    def rotate(image: np.ndarray, degrees: float) -> np.ndarray:
        rgb = image[:, :, :3].astype(np.float64)
        return _with_rgb(image, rgb @ hue_rotation_matrix(degrees).T)


class Saturate(BaseTransform):
    """
    Scales the HSL saturation by a factor whose range depends on how much
    room the image has to become more or less saturated.
    """
    K = 0.8
    MAX_MIN_DELTA = 0.10

    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        stats = compute_statistics(image)

        room_up = max(1.0 - stats.mean_saturation, 0.0)
        room_down = max(stats.mean_saturation, 0.0)
        min_factor = max(1.0 - self.K * room_down, 0.0)
        max_factor = 1.0 + self.K * room_up

        factor = sample_triangular(rng, min_factor, 1.0, max_factor)

        # DEV: прыжок на min_delta не должен выйти за доступный диапазон.
        min_delta = min(self.MAX_MIN_DELTA, max(abs(max_factor - 1.0), abs(1.0 - min_factor)))
        deviation = enforce_minimum_effect(rng, factor - 1.0, min_delta)
        factor = min(max(1.0 + deviation, min_factor), max_factor)

        return self.scale_saturation(image, factor)

    @staticmethod
    def scale_saturation(image: np.ndarray, factor: float) -> np.ndarray:
        rgb = np.ascontiguousarray(image[:, :, :3], dtype=np.float32) / SETTINGS.IMAGE.UINT8_MAX
        hls = cv2.cvtColor(rgb, cv2.COLOR_RGB2HLS)
        hls[:, :, 2] = np.clip(hls[:, :, 2] * factor, 0.0, 1.0)
        adjusted = cv2.cvtColor(hls, cv2.COLOR_HLS2RGB)
        return _with_rgb(image, adjusted * SETTINGS.IMAGE.UINT8_MAX)


class Brighten(BaseTransform):
    """
    Adds a signed delta to every color channel. The delta range follows the
    headroom left between the mean luma and pure black / pure white.
    """
    MIN_HEADROOM = 10.0
    MIN_EFFECT = 10.0
    MIN_EFFECT_FRACTION = 0.15

    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        stats = compute_statistics(image)
        max_value = float(SETTINGS.IMAGE.UINT8_MAX)

        max_up = min(max(max_value * (1.0 - stats.mean_luma), self.MIN_HEADROOM), max_value)
        max_down = min(max(max_value * stats.mean_luma, self.MIN_HEADROOM), max_value)

        delta = sample_triangular(rng, -max_down, 0.0, max_up)

        nearest_room = max_up if delta >= 0 else max_down
        min_abs = max(self.MIN_EFFECT, self.MIN_EFFECT_FRACTION * nearest_room)
        delta = enforce_minimum_effect(rng, delta, min_abs)
        delta = min(max(delta, -max_down), max_up)

        return self.brighten(image, _round_half_away(delta))

    @staticmethod
    def brighten(image: np.ndarray, delta: int) -> np.ndarray:
        return _with_rgb(image, image[:, :, :3].astype(np.int16) + delta)


class Contrast(BaseTransform):
    """
    Adjusts contrast by a percentage in [-50, max_increase]. Images whose mean
    luma is far from mid-gray get less room to increase contrast.
    """
    MAX_DECREASE = 50.0
    MAX_INCREASE = 50.0
    MIN_EFFECT = 5.0
    MIN_EFFECT_FRACTION = 0.20

    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        stats = compute_statistics(image)
        center_distance = abs(stats.mean_luma - 0.5)

        max_increase = min(max(1.0 - 2.0 * center_distance, 0.0), 1.0) * self.MAX_INCREASE
        max_decrease = self.MAX_DECREASE

        contrast = sample_triangular(rng, -max_decrease, 0.0, max_increase)

        nearest_room = max_increase if contrast >= 0 else max_decrease
        min_abs = max(self.MIN_EFFECT, self.MIN_EFFECT_FRACTION * nearest_room)
        contrast = enforce_minimum_effect(rng, contrast, min_abs)
        contrast = min(max(contrast, -max_decrease), max_increase)

        return self.adjust_contrast(image, contrast)

    @staticmethod
    def adjust_contrast(image: np.ndarray, contrast: float) -> np.ndarray:
        max_value = float(SETTINGS.IMAGE.UINT8_MAX)
        percent = ((100.0 + contrast) / 100.0) ** 2
        rgb = image[:, :, :3].astype(np.float32) / max_value
        return _with_rgb(image, ((rgb - 0.5) * percent + 0.5) * max_value)


# --- Filters ---

class Grayscale(BaseTransform):
    """Replaces every color channel by the Rec. 709 luma. Alpha is kept."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        luma = image[:, :, :3].astype(np.float32) @ LUMA_WEIGHTS
        return _with_rgb(image, np.repeat(luma[:, :, np.newaxis], 3, axis=2))


class Invert(BaseTransform):
    """Inverts the color channels. Alpha is kept."""
    def apply(self, image: np.ndarray, rng: random.Random) -> np.ndarray:
        out = image.copy()
        out[:, :, :3] = SETTINGS.IMAGE.UINT8_MAX - image[:, :, :3]
        return out
