"""Tests for the HOTP engine."""

import re

import pytest

from tinytotp.hotp import hotp_code, int_to_bytestring, truncate
from tinytotp.utils import InvalidParameter

RFC4226_SECRET = b"12345678901234567890"


class TestIntToBytestring:
    """Tests for counter encoding."""

    def test_zero_is_eight_null_bytes(self):
        """Counter 0 should encode to eight zero bytes."""
        assert int_to_bytestring(0) == b"\0" * 8

    def test_big_endian(self):
        """Counters should be encoded big-endian and left padded."""
        assert int_to_bytestring(12345) == b"\x00\x00\x00\x00\x00\x00\x30\x39"

    def test_largest_counter(self):
        """The largest 64-bit counter should fill all eight bytes."""
        assert int_to_bytestring((1 << 64) - 1) == b"\xff" * 8


class TestTruncate:
    """Tests for dynamic truncation."""

    def test_rfc4226_example(self):
        """The worked example from RFC 4226 section 5.4 should give 0x50ef7f19."""
        digest = bytes.fromhex("1f8698690e02ca16618550ef7f19da8e945b555a")
        assert truncate(digest) == 0x50EF7F19

    def test_top_bit_is_cleared(self):
        """The most significant bit of the selected bytes should be masked off."""
        digest = b"\xff" * 19 + b"\x00"
        assert truncate(digest) == 0x7FFFFFFF

    def test_offset_uses_low_nibble_of_last_byte(self):
        """An offset nibble of 15 should select bytes 15 to 18."""
        digest = bytes(15) + b"\x01\x02\x03\x04\x0f"
        assert truncate(digest) == 0x01020304


class TestHotpCode:
    """Tests for hotp_code."""

    @pytest.mark.parametrize(
        "counter,expected",
        [
            (0, "755224"),
            (1, "287082"),
            (2, "359152"),
            (3, "969429"),
            (4, "338314"),
            (5, "254676"),
            (6, "287922"),
            (7, "162583"),
            (8, "399871"),
            (9, "520489"),
        ],
    )
    def test_rfc4226_vectors(self, counter, expected):
        """hotp_code should match the RFC 4226 appendix D values."""
        assert hotp_code(RFC4226_SECRET, counter) == expected

    def test_ten_digits(self):
        """Ten digit codes should be the full 31-bit truncated value."""
        assert hotp_code(RFC4226_SECRET, 0, digits=10) == "1284755224"
        assert hotp_code(RFC4226_SECRET, 1, digits=10) == "1094287082"

    @pytest.mark.parametrize("digits", [6, 7, 8, 9, 10])
    def test_length_and_charset(self, digits):
        """Codes should be exactly `digits` decimal characters."""
        for counter in range(50):
            code = hotp_code(b"some secret", counter, digits=digits)
            assert re.fullmatch(r"\d{%d}" % digits, code)

    def test_deterministic(self):
        """The same inputs should always give the same code."""
        assert hotp_code(b"key", 42) == hotp_code(b"key", 42)

    @pytest.mark.parametrize("digits", [0, 5, 11, -6, True, 6.0, "6"])
    def test_rejects_bad_digits(self, digits):
        """Digit counts outside 6..10 should raise InvalidParameter."""
        with pytest.raises(InvalidParameter):
            hotp_code(RFC4226_SECRET, 0, digits=digits)

    @pytest.mark.parametrize("counter", [-1, 1 << 64, 1.5])
    def test_rejects_bad_counter(self, counter):
        """Negative, oversized and non-integer counters should raise InvalidParameter."""
        with pytest.raises(InvalidParameter):
            hotp_code(RFC4226_SECRET, counter)

    def test_invalid_parameter_is_value_error(self):
        """InvalidParameter should be catchable as ValueError."""
        with pytest.raises(ValueError):
            hotp_code(RFC4226_SECRET, 0, digits=4)
