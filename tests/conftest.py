"""
Shared fixtures for all tests.
"""
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import imageio.v2 as iio
import numpy as np
import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dataset_augmentor.execution.progress import EventSink


class RecordingSink(EventSink):
    """Keeps every emitted event in order."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any] | None]] = []

    def emit(self, event: str, payload: Dict[str, Any] | None = None) -> None:
        self.events.append((event, payload))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def progress(self) -> List[Dict[str, Any]]:
        return [payload for name, payload in self.events if name == "progress"]


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def rgba_image():
    """A random 24x32 RGBA image with a non-trivial alpha channel."""
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, (24, 32, 4), dtype=np.uint8)


@pytest.fixture
def write_png():
    """Factory writing a uint8 array as PNG, creating parent folders."""
    def _write(path: Path, array: np.ndarray) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        iio.imwrite(str(path), array)
        return path
    return _write


@pytest.fixture
def png_dataset(tmp_path, write_png):
    """An input folder with three small RGB PNGs of different content."""
    rng = np.random.default_rng(7)
    input_root = tmp_path / "input"
    paths = []
    for name in ("alpha", "beta", "gamma"):
        array = rng.integers(0, 256, (12, 16, 3), dtype=np.uint8)
        paths.append(write_png(input_root / f"{name}.png", array))
    return input_root, sorted(paths)


def pytest_configure(config):
    config.addinivalue_line("markers", "e2e: end-to-end runs that read and write real image files")
