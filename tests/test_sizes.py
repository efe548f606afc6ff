"""Tests for byte-count parsing and decimal unit conversion."""
import pytest

from voltools.cloud.errors import InvalidSize
from voltools.cloud.sizes import bytes_to_gb, convert_size, parse_size


def test_parse_size_accepts_decimal_byte_count():
    assert parse_size("5000000000") == 5_000_000_000
    assert parse_size(" 42 ") == 42


@pytest.mark.parametrize("size", ["", "1.5", "10GB", "0x10", None, "0", "-100"])
def test_parse_size_rejects_invalid(size):
    with pytest.raises(InvalidSize):
        parse_size(size)


def test_conversion_truncates_toward_zero():
    assert convert_size(1_999_999, "MB") == 1
    assert convert_size(999_999, "MB") == 0
    assert bytes_to_gb(1_999_999_999) == 1


def test_conversion_uses_decimal_units():
    assert bytes_to_gb(5_000_000_000) == 5
    assert bytes_to_gb(1024 ** 3) == 1
    assert convert_size(1_000, "kb") == 1


def test_unknown_unit():
    with pytest.raises(ValueError):
        convert_size(1, "GiB")
