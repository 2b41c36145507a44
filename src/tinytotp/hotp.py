"""
HMAC-based one-time passwords (RFC 4226).

Only the code computation lives here; time handling is in :mod:`.totp`.
"""
import hashlib
import hmac

from .utils import DEFAULT_DIGITS, InvalidParameter, check_digits

MAX_COUNTER = 1 << 64


def int_to_bytestring(i: int, padding: int = 8) -> bytes:
    """
    Turns an integer to the OATH specified
    bytestring, which is fed to the HMAC
    along with the secret
    """
    result = bytearray()
    while i != 0:
        result.append(i & 0xFF)
        i >>= 8
    return bytes(bytearray(reversed(result)).rjust(padding, b"\0"))


def truncate(hmac_hash: bytes) -> int:
    """
    Dynamic truncation: the low nibble of the last byte picks the offset
    of four bytes, read big-endian with the top bit cleared.
    """
    offset = hmac_hash[-1] & 0xF
    return (
        (hmac_hash[offset] & 0x7F) << 24
        | (hmac_hash[offset + 1] & 0xFF) << 16
        | (hmac_hash[offset + 2] & 0xFF) << 8
        | (hmac_hash[offset + 3] & 0xFF)
    )


def hotp_code(secret: bytes, counter: int, digits: int = DEFAULT_DIGITS) -> str:
    """
    :param secret: raw secret bytes used as the HMAC key
    :param counter: the HMAC counter value, the moving factor
    :param digits: code length, 6 to 10
    :returns: the code, zero-padded to ``digits`` characters
    """
    check_digits(digits)
    if isinstance(counter, bool) or not isinstance(counter, int) or not 0 <= counter < MAX_COUNTER:
        raise InvalidParameter("counter must be a non-negative 64-bit integer")

    hasher = hmac.new(bytes(secret), int_to_bytestring(counter), hashlib.sha1)
    code = truncate(hasher.digest())
    # Adding 10**10 then slicing keeps the leading zeros for every length up to 10.
    str_code = str(10_000_000_000 + (code % 10**digits))
    return str_code[-digits:]
