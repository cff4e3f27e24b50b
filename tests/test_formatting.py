"""Tests for size/reduction formatting and the quality slider mapping."""

import pytest

from pdf_recompressor.formatting import calculate_reduction, format_size, quality_from_slider


@pytest.mark.parametrize("num_bytes, expected", [
    (0, "0 Bytes"),
    (500, "500 Bytes"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (1126, "1.1 KB"),
    (1048576, "1 MB"),
    (5 * 1024 ** 3, "5 GB"),
    (3 * 1024 ** 4, "3072 GB"),
])
def test_format_size(num_bytes, expected):
    assert format_size(num_bytes) == expected


def test_format_size_decimals():
    assert format_size(1234567, decimals=1) == "1.2 MB"


@pytest.mark.parametrize("original, compressed, expected", [
    (1000, 0, 100),
    (1000, 500, 50),
    (1000, 505, 50),   # 49.5 rounds up
    (1000, 1200, 0),   # growth is shown as no reduction
    (0, 0, 0),
    (0, 4096, 0),
])
def test_calculate_reduction(original, compressed, expected):
    assert calculate_reduction(original, compressed) == expected


def test_quality_from_slider():
    assert quality_from_slider(0) == 1.0
    assert quality_from_slider(50) == 0.5
    assert quality_from_slider(70) == 0.3
    assert quality_from_slider(100) == 0.0


@pytest.mark.parametrize("value", [-1, 101])
def test_quality_from_slider_range(value):
    with pytest.raises(ValueError):
        quality_from_slider(value)
