"""Perceptual hashing based on average luminosity."""

from __future__ import annotations

import imagehash
import numpy as np
from PIL import Image

from ..errors import IncomparableHashes
from ..load.decode import resize_square

DEFAULT_HASH_SIZE = 16

# ITU-R 601 luma weights, scaled to integers so the mean comparison is exact.
_LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)


def average_luminosity_hash(
    img: Image.Image, hash_size: int = DEFAULT_HASH_SIZE
) -> imagehash.ImageHash:
    """Return the *hash_size* x *hash_size* luminosity hash of *img*.

    A bit is set when its pixel is strictly brighter than the mean, so a
    uniform image hashes to all zeros.
    """
    if not isinstance(img, Image.Image):
        raise TypeError("average_luminosity_hash expects a PIL.Image.Image instance")
    if hash_size < 2:
        raise ValueError("Hash size must be greater than or equal to 2")

    small = resize_square(img, hash_size)
    rgb = np.asarray(small, dtype=np.int64)[:, :, :3]
    luminosity = rgb @ _LUMA_WEIGHTS
    # L > sum / n  <=>  L * n > sum
    bits = luminosity * luminosity.size > int(luminosity.sum())
    return imagehash.ImageHash(bits)


def hamming_distance(a: imagehash.ImageHash, b: imagehash.ImageHash) -> int:
    """Return the number of differing bits between two equal-length hashes."""
    length = _bit_length(a)
    if length == 0 or length != _bit_length(b):
        raise IncomparableHashes(
            f"Cannot compare hashes of {length} and {_bit_length(b)} bits"
        )
    return int(a - b)


def hash_similarity(a: imagehash.ImageHash, b: imagehash.ImageHash) -> float:
    """Return the share of matching bits as a percentage."""
    distance = hamming_distance(a, b)
    length = _bit_length(a)
    return (length - distance) / length * 100.0


def hash_to_bits(value: imagehash.ImageHash) -> str:
    """Return the row-major ``0``/``1`` string form of *value*."""
    return "".join("1" if bit else "0" for bit in value.hash.flatten())


def _bit_length(value: imagehash.ImageHash | None) -> int:
    if value is None:
        return 0
    return int(np.asarray(value.hash).size)
