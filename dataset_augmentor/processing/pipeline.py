"""
The AugmentationPipeline decides which variants are produced for one image.

Transform names are split into two classes:
- "always" transforms (the pixel shifts) are applied cumulatively, once, to the
  original and form the shifted base;
- "one-time" transforms are each applied independently to that base and each
  produce their own output. They never compose with each other.
"""
import random
from typing import Dict, Iterable, List, Tuple, Any

import numpy as np

from dataset_augmentor.config import SETTINGS
from dataset_augmentor.errors import OperatorError
from dataset_augmentor.processing.registry import TransformationRegistry, default_registry
from dataset_augmentor.processing.seeding import derive_seed

ALWAYS_TRANSFORMATIONS = ("hor_shift", "ver_shift")


def split_transformations(names: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Splits transform names into (always, one_time), keeping the caller's order
    inside each list.
    """
    always: List[str] = []
    one_time: List[str] = []
    for name in names:
        if name in ALWAYS_TRANSFORMATIONS:
            always.append(name)
        else:
            one_time.append(name)
    return always, one_time


def writes_shifted(always: List[str], one_time: List[str]) -> bool:
    """The shifted base is an output of its own unless it only feeds one-time variants."""
    return bool(always) or not one_time


def output_variants(always: List[str], one_time: List[str]) -> List[str | None]:
    """
    Every variant suffix a file can be written under, in output order.
    None stands for the re-encoded original.
    """
    variants: List[str | None] = [None]
    if writes_shifted(always, one_time):
        variants.append(SETTINGS.OUTPUT.SHIFTED_SUFFIX)
    return variants + list(one_time)


def apply_transformation(image: np.ndarray,
                         name: str,
                         seed: int,
                         registry: TransformationRegistry) -> np.ndarray | None:
    """
    Applies a single named transform with its own seeded RNG.

    Returns:
        The transformed image, or None if the name is unknown or the operator
        failed. Both cases are reported and never raised.
    """
    transform = registry.create(name)
    if transform is None:
        print(f"[WARNING] Transformation '{name}' is not implemented, skipping.")
        return None

    rng = random.Random(seed)
    try:
        return transform(image, rng)
    except OperatorError as e:
        print(f"[WARNING] Error applying transformation '{name}', skipping: {e}")
        return None


class AugmentationPipeline:
    """Builds every output variant for a single image."""

    def __init__(self,
                 always: List[str],
                 one_time: List[str],
                 registry: TransformationRegistry | None = None):
        """
        Args:
            always: Cumulative transforms, in application order.
            one_time: Independent transforms, in output order.
            registry: Where operators are looked up. Defaults to the built-in catalog.
        """
        self.always = list(always)
        self.one_time = list(one_time)
        self.registry = registry or default_registry()

    def build_base(self, image: np.ndarray, stem: str, base_seed: int) -> np.ndarray:
        """
        Applies every always-transform in order. A failing step keeps the image
        from before that step and the chain continues.
        """
        base = image
        for name in self.always:
            seed = derive_seed(base_seed, stem, name)
            result = apply_transformation(base, name, seed, self.registry)
            if result is not None:
                base = result
        return base

    def process(self, image: np.ndarray, stem: str, base_seed: int) -> List[Dict[str, Any]]:
        """
        Produces the augmented variants of one image (the original itself is not included).

        Args:
            image: The decoded original, RGBA uint8.
            stem: Normalized file stem used for seeding.
            base_seed: Run-level seed.

        Returns:
            A list of {'variant': suffix, 'image': array} in output order. The
            shifted base comes first (suffix 'shifted') whenever always-transforms
            were requested or no one-time transform was, followed by one entry per
            one-time transform that succeeded.
        """
        # DEV: Политика "cumulative-once": сдвиги применяются один раз, и все
        # one-time ветки получают один и тот же базовый вариант. Пересчитывать
        # базу перед каждой веткой нельзя - это другие выходы.
        base = self.build_base(image, stem, base_seed)

        variants: List[Dict[str, Any]] = []
        if writes_shifted(self.always, self.one_time):
            variants.append({'variant': SETTINGS.OUTPUT.SHIFTED_SUFFIX, 'image': base})

        for name in self.one_time:
            seed = derive_seed(base_seed, stem, name)
            transformed = apply_transformation(base, name, seed, self.registry)
            if transformed is not None:
                variants.append({'variant': name, 'image': transformed})

        return variants
