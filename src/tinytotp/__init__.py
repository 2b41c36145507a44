import logging
import secrets
import time as _time
from re import split
from typing import Any, Dict, Optional, Sequence
from urllib.parse import parse_qsl, unquote, urlparse

from . import utils
from .hotp import hotp_code as hotp_code
from .otp import OTP as OTP
from .totp import TOTP as TOTP
from .utils import DEFAULT_DIGITS, DEFAULT_PERIOD, DEFAULT_SECRET_SIZE
from .utils import InvalidParameter as InvalidParameter

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def secret(size: int = DEFAULT_SECRET_SIZE) -> bytes:
    """
    Generate a secret composed of ``size`` random bytes.

    The default of 20 bytes (160 bits) is the length recommended by RFC 4226.
    Bytes come from the operating system's secure random source; if it is
    unavailable the error propagates.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise InvalidParameter("size must be a non-negative integer")
    logger.debug("generating %d byte secret", size)
    return secrets.token_bytes(size)


generate_secret = secret


def random_base32(length: int = 32, chars: Sequence[str] = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567") -> str:
    # Note: the otpauth scheme DOES NOT use base32 padding for secret lengths not divisible by 8.
    # Some third-party tools have bugs when dealing with such secrets.
    if length < 32:
        raise InvalidParameter("Secrets should be at least 160 bits")

    return "".join(secrets.choice(chars) for _ in range(length))


def verification_code(
    secret: bytes,
    time: Optional[utils.TimeInput] = None,
    period: int = DEFAULT_PERIOD,
    digits: int = DEFAULT_DIGITS,
) -> str:
    """
    Generate the time-based one-time password for ``secret``.

    :param secret: raw secret bytes
    :param time: an int Unix timestamp or a datetime, defaults to now
    :param period: the number of seconds a code is valid for
    :param digits: code length, 6 to 10
    :returns: the code as a zero-padded string
    """
    totp = TOTP(secret, digits=digits, interval=period)
    if time is None:
        time = _time.time()
    return totp.at(time)


def valid(
    secret: bytes,
    otp: Any,
    time: Optional[utils.TimeInput] = None,
    period: int = DEFAULT_PERIOD,
    digits: int = DEFAULT_DIGITS,
    since: Optional[utils.TimeInput] = None,
    valid_window: int = 0,
) -> bool:
    """
    Checks if the given ``otp`` code matches the secret.

    Pass ``since`` as the time the last code was accepted to prevent
    reuse: only codes from a later time window are then valid, so a user
    may have to wait for the next code. Windows start every ``period``
    seconds from the Unix epoch, not from ``since``.

    ``valid_window`` additionally accepts codes from that many periods
    before and after ``time``, as a grace period for clock drift or slow
    typing.

    Parameters are checked before the code: out of range ``digits`` or
    ``period`` raise :class:`InvalidParameter`. A wrong, malformed or
    reused code only returns False.
    """
    return TOTP(secret, digits=digits, interval=period).verify(
        otp, for_time=time, since=since, valid_window=valid_window
    )


def otpauth_uri(label_or_issuer: str, *args: Any, **kwargs: Any) -> str:
    """
    Generate the uri to be encoded in the QR code.

    Two call shapes are accepted::

        otpauth_uri("Acme:alice", secret, {"issuer": "Acme"})
        otpauth_uri("Acme", "alice", secret)

    Both return ``"otpauth://totp/Acme:alice?secret=MFRGGZA&issuer=Acme"``
    for ``secret = b"abcd"``. The second form checks that neither part
    contains a colon and always adds the issuer parameter.
    """
    if (args and isinstance(args[0], str)) or "account" in kwargs:
        return utils.build_issuer_uri(label_or_issuer, *args, **kwargs)
    return utils.build_uri(label_or_issuer, *args, **kwargs)


def parse_uri(uri: str) -> TOTP:
    """
    Parses the provisioning URI for a TOTP.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param uri: the totp URI to parse
    :returns: TOTP object
    """

    # Secret (to be filled in later)
    secret = None

    # Data we'll parse to the correct constructor
    otp_data: Dict[str, Any] = {}

    parsed_uri = urlparse(uri)

    if parsed_uri.scheme != "otpauth":
        raise InvalidParameter("Not an otpauth URI")
    if parsed_uri.netloc != "totp":
        raise InvalidParameter("Not a supported OTP type")

    # Parse issuer/accountname info
    accountinfo_parts = split(":|%3A", parsed_uri.path[1:], maxsplit=1)
    if len(accountinfo_parts) == 1:
        otp_data["name"] = unquote(accountinfo_parts[0])
    else:
        otp_data["issuer"] = unquote(accountinfo_parts[0])
        otp_data["name"] = unquote(accountinfo_parts[1])

    # Parse values
    for key, value in parse_qsl(parsed_uri.query):
        if key == "secret":
            secret = value
        elif key == "issuer":
            if "issuer" in otp_data and otp_data["issuer"] is not None and otp_data["issuer"] != value:
                raise InvalidParameter("If issuer is specified in both label and parameters, it should be equal.")
            otp_data["issuer"] = value
        elif key == "algorithm":
            if value.upper() != "SHA1":
                raise InvalidParameter("Invalid value for algorithm, must be SHA1")
        elif key in ("digits", "period"):
            try:
                number = int(value)
            except ValueError as exc:
                raise InvalidParameter("Invalid value for {}: {!r}".format(key, value)) from exc
            otp_data["digits" if key == "digits" else "interval"] = number

    if not secret:
        raise InvalidParameter("No secret found in URI")
    try:
        byte_secret = utils.b32decode(secret)
    except ValueError as exc:
        raise InvalidParameter("Secret is not valid base32") from exc

    return TOTP(byte_secret, **otp_data)
