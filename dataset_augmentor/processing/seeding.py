"""
Deterministic seed derivation.

A run has one base seed. Every (file, transform) pair gets its own seed derived
from the base seed and its identity, so the outputs never depend on which worker
processed which file or in what order.
"""
import hashlib

U64_MAX = 2 ** 64 - 1


def derive_seed(base_seed: int, stem: str, transform_name: str) -> int:
    """
    Mixes the base seed, the file stem and the transform name into a 64-bit seed.

    The little-endian bytes of `base_seed` are hashed first, then the UTF-8 bytes
    of `stem`, then those of `transform_name`. The first 8 bytes of the digest
    are read back as a little-endian integer.

    Args:
        base_seed: Run-level seed, 0 <= base_seed < 2**64.
        stem: Normalized (lowercase) file stem.
        transform_name: Registered name of the transformation.
    """
    if not 0 <= base_seed <= U64_MAX:
        raise ValueError(f"base_seed must fit in 64 unsigned bits, got {base_seed}")

    h = hashlib.blake2b(digest_size=8)
    h.update(base_seed.to_bytes(8, "little"))
    h.update(stem.encode("utf-8"))
    h.update(transform_name.encode("utf-8"))
    return int.from_bytes(h.digest()[:8], "little")


def normalize_stem(stem: str) -> str:
    """File identity used for seeding: the stem, lowercased."""
    return stem.lower()
