"""
Maps transformation names to operator constructors.
"""
from typing import Callable, Dict, List, Optional

from dataset_augmentor.processing import transforms

# DEV: Каталог (словарь) - та же "фабрика", что и раньше: имя из конфига -> класс.
# Новая трансформация = новая строка здесь, основной код не меняется.
TRANSFORM_CATALOG: Dict[str, Callable[[], transforms.BaseTransform]] = {
    "hor_shift": transforms.HorizontalShift,
    "ver_shift": transforms.VerticalShift,
    "rotate90": transforms.Rotate90,
    "rotate180": transforms.Rotate180,
    "rotate270": transforms.Rotate270,
    "mirror": transforms.Mirror,
    "flip": transforms.Flip,
    "hue_rotation": transforms.HueRotate,
    "saturation": transforms.Saturate,
    "brightness": transforms.Brighten,
    "contrast": transforms.Contrast,
    "grayscale": transforms.Grayscale,
    "invert": transforms.Invert,
}


class TransformationRegistry:
    """Open for registration; looking up an unknown name is not an error."""

    def __init__(self, catalog: Optional[Dict[str, Callable[[], transforms.BaseTransform]]] = None):
        self._constructors: Dict[str, Callable[[], transforms.BaseTransform]] = dict(catalog or {})

    def register(self, name: str, constructor: Callable[[], transforms.BaseTransform]) -> None:
        """Registers (or replaces) the constructor for `name`."""
        self._constructors[name] = constructor

    def create(self, name: str) -> Optional[transforms.BaseTransform]:
        """
        Builds a fresh operator for `name`.

        Returns:
            A new transform instance, or None if the name is not registered.
            Callers skip the variant with a warning in that case.
        """
        constructor = self._constructors.get(name)
        if constructor is None:
            return None
        return constructor()

    def __contains__(self, name: str) -> bool:
        return name in self._constructors

    def names(self) -> List[str]:
        return list(self._constructors.keys())


def default_registry() -> TransformationRegistry:
    """A registry pre-populated with every built-in transformation."""
    return TransformationRegistry(TRANSFORM_CATALOG)
