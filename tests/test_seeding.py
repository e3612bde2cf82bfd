"""
Unit tests for deterministic seed derivation.
"""
from concurrent.futures import ThreadPoolExecutor

import pytest

from dataset_augmentor.processing.seeding import derive_seed, normalize_stem, U64_MAX


class TestDeriveSeed:

    def test_same_inputs_same_seed(self):
        first = derive_seed(42, "cat_001", "hue_rotation")
        assert all(derive_seed(42, "cat_001", "hue_rotation") == first for _ in range(10))

    def test_seed_is_unsigned_64_bit(self):
        for base in (0, 1, 42, U64_MAX):
            seed = derive_seed(base, "img", "grayscale")
            assert 0 <= seed <= U64_MAX

    def test_distinct_for_different_identities(self):
        stems = ["img_0", "img_1", "img_2", "dog", "cat"]
        names = ["hor_shift", "ver_shift", "brightness", "contrast", "saturation"]
        seeds = [derive_seed(42, stem, name) for stem in stems for name in names]
        assert len(seeds) >= 20
        assert len(set(seeds)) == len(seeds)

    def test_base_seed_changes_result(self):
        assert derive_seed(1, "img", "contrast") != derive_seed(2, "img", "contrast")

    def test_stem_and_name_are_not_interchangeable(self):
        assert derive_seed(5, "img", "flip") != derive_seed(5, "flip", "img")

    def test_independent_of_threads(self):
        pairs = [(f"file_{i}", name) for i in range(20) for name in ("mirror", "invert")]
        expected = [derive_seed(99, stem, name) for stem, name in pairs]
        with ThreadPoolExecutor(max_workers=4) as pool:
            got = list(pool.map(lambda p: derive_seed(99, *p), reversed(pairs)))
        assert list(reversed(got)) == expected

    @pytest.mark.parametrize("base_seed", [-1, U64_MAX + 1])
    def test_rejects_out_of_range_base_seed(self, base_seed):
        with pytest.raises(ValueError):
            derive_seed(base_seed, "img", "flip")


def test_normalize_stem_lowercases():
    assert normalize_stem("IMG_0001") == "img_0001"
