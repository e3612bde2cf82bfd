"""
End-to-end test of the command line entry point.
"""
import sys

import cv2
import numpy as np
import pytest

import run_augmentation


def _config(tmp_path, input_root, output_root, extra=""):
    path = tmp_path / "run.yaml"
    path.write_text(
        f"input_root: {input_root}\n"
        f"output_root: {output_root}\n"
        "transformations: [hor_shift, invert]\n"
        "seed: 5\n"
        "workers: 2\n" + extra,
        encoding="utf-8",
    )
    return path


@pytest.mark.e2e
def test_main_augments_input_directory(png_dataset, tmp_path, monkeypatch):
    input_root, _ = png_dataset
    output_root = tmp_path / "out"
    config = _config(tmp_path, input_root, output_root)
    monkeypatch.setattr(sys, "argv", ["augment-dataset", "--config", str(config)])

    run_augmentation.main()

    assert len(list(output_root.glob("*.png"))) == 9


@pytest.mark.e2e
def test_main_with_preprocessing(tmp_path, write_png, monkeypatch):
    raw = tmp_path / "raw"
    write_png(raw / "a.png", np.zeros((6, 6, 3), dtype=np.uint8))
    write_png(raw / "b.png", np.zeros((6, 6, 3), dtype=np.uint8))
    write_png(raw / "c.png", np.zeros((6, 9, 3), dtype=np.uint8))
    output_root = tmp_path / "out"
    staging = tmp_path / "staging"
    config = _config(tmp_path, raw, output_root,
                     f"preprocess:\n  enabled: true\n  staging_root: {staging}\n  square_only: true\n")
    monkeypatch.setattr(sys, "argv", ["augment-dataset", "--config", str(config)])

    run_augmentation.main()

    assert sorted(p.name for p in (output_root / "6x6").iterdir()) == [
        "a.png", "a_invert.png", "a_shifted.png", "b.png", "b_invert.png", "b_shifted.png",
    ]
    assert not (output_root / "9x6").exists()


@pytest.mark.e2e
def test_main_with_pairing_and_conversion(tmp_path, write_png, monkeypatch):
    low, high = tmp_path / "low", tmp_path / "high"
    write_png(low / "4x4" / "stone.png", np.zeros((4, 4, 3), dtype=np.uint8))
    write_png(low / "4x4" / "lonely.png", np.zeros((4, 4, 3), dtype=np.uint8))
    write_png(high / "8x8" / "stone.png", np.zeros((8, 8, 3), dtype=np.uint8))
    output_root = tmp_path / "out"
    config = _config(tmp_path, low, output_root,
                     f"pairing:\n  enabled: true\n  counterpart_root: {high}\n  scale_factor: 2\n"
                     "conversion:\n  enabled: true\n")
    monkeypatch.setattr(sys, "argv", ["augment-dataset", "--config", str(config)])

    run_augmentation.main()

    assert not (low / "4x4" / "lonely.png").exists()
    assert cv2.imread(str(low / "4x4" / "stone.png"), cv2.IMREAD_UNCHANGED).shape == (4, 4, 4)
    assert sorted(p.name for p in (output_root / "4x4").iterdir()) == [
        "stone.png", "stone_invert.png", "stone_shifted.png",
    ]
