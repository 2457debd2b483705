import pytest
from PIL import Image

from product_dedup.errors import IncomparableHashes
from product_dedup.features.perceptual import (
    average_luminosity_hash,
    hamming_distance,
    hash_similarity,
    hash_to_bits,
)

from conftest import noise, solid, split_vertical


def test_uniform_image_hashes_to_zeros():
    value = average_luminosity_hash(solid())
    assert hash_to_bits(value) == "0" * 256


def test_hash_is_deterministic():
    img = noise(1)
    assert hash_to_bits(average_luminosity_hash(img)) == hash_to_bits(average_luminosity_hash(img))


@pytest.mark.parametrize("size", [(3, 7), (16, 16), (300, 120)])
def test_hash_length_ignores_input_dimensions(size):
    assert len(average_luminosity_hash(noise(2, size=size))) == 256


def test_hash_size_controls_length():
    assert len(hash_to_bits(average_luminosity_hash(noise(3), hash_size=8))) == 64


def test_bright_pixels_set_bits_in_raster_order():
    bits = hash_to_bits(average_luminosity_hash(split_vertical()))
    first_row = bits[:16]
    assert first_row[0] == "0"
    assert first_row[-1] == "1"


def test_grayscale_input_is_accepted():
    img = Image.new("L", (20, 20), 90)
    assert hash_to_bits(average_luminosity_hash(img)) == "0" * 256


def test_invalid_inputs():
    with pytest.raises(TypeError):
        average_luminosity_hash("not an image")
    with pytest.raises(ValueError):
        average_luminosity_hash(solid(), hash_size=1)


def test_self_similarity_is_full():
    value = average_luminosity_hash(noise(4))
    assert hamming_distance(value, value) == 0
    assert hash_similarity(value, value) == 100.0


def test_hash_similarity_is_symmetric():
    a = average_luminosity_hash(noise(5))
    b = average_luminosity_hash(noise(6))
    assert hash_similarity(a, b) == hash_similarity(b, a)
    assert 0.0 <= hash_similarity(a, b) <= 100.0


def test_similarity_counts_matching_bits():
    a = average_luminosity_hash(solid())
    b = average_luminosity_hash(split_vertical())
    distance = hash_to_bits(b).count("1")
    assert hamming_distance(a, b) == distance
    assert hash_similarity(a, b) == pytest.approx((256 - distance) / 256 * 100)


def test_hashes_of_different_lengths_are_incomparable():
    a = average_luminosity_hash(solid(), hash_size=8)
    b = average_luminosity_hash(solid(), hash_size=16)
    with pytest.raises(IncomparableHashes):
        hash_similarity(a, b)
