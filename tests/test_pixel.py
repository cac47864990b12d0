# -*- coding: utf-8 -*-
import numpy as np
import pytest

from fits_builder import image_hdu
from models import FITS, FITSStorage, hdu_min_max, physical_image, value_at


def primary(image, bitpix, extra=()):
    return FITS(FITSStorage.from_bytes(image_hdu(image, bitpix, extra=extra))).primary_hdu


def test_value_at_applies_bscale_and_bzero():
    image = np.array([[0, 0, 0], [0, 0, 5]], dtype=np.int16)
    hdu = primary(image, 16, extra=[("BSCALE", "2.0"), ("BZERO", "100.0")])
    assert value_at(hdu, 2, 1) == 110.0
    assert value_at(hdu, 0, 0) == 100.0


@pytest.mark.parametrize(
    "bitpix, value",
    [(8, 200), (16, -1234), (32, 70000), (64, 2 ** 40), (-32, 1.5), (-64, -2.25)],
)
def test_value_at_corrects_byte_order(bitpix, value):
    image = np.zeros((2, 2))
    image[1, 0] = value
    hdu = primary(image, bitpix)
    assert value_at(hdu, 0, 1) == value
    assert value_at(hdu, 1, 1) == 0.0


def test_physical_image_and_min_max():
    image = np.array([[1, 2], [3, 4]], dtype=np.int16)
    hdu = primary(image, 16, extra=[("BZERO", "10")])
    np.testing.assert_array_equal(physical_image(hdu), [[11, 12], [13, 14]])
    assert hdu_min_max(hdu) == (11.0, 14.0)


def test_min_max_ignores_nan_and_widens_flat_images():
    image = np.array([[np.nan, 3.0], [3.0, np.inf]], dtype=np.float32)
    assert hdu_min_max(primary(image, -32)) == (3.0, 4.0)
