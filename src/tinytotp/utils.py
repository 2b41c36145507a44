import base64
import calendar
import datetime
import math
from hmac import compare_digest
from typing import Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlencode, urlparse

DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30
DEFAULT_SECRET_SIZE = 20
MIN_DIGITS = 6
MAX_DIGITS = 10

TimeInput = Union[int, float, datetime.datetime]
UriParams = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


class InvalidParameter(ValueError):
    """
    Raised when a caller passes an argument outside its documented range.

    These are programming errors, never validation outcomes: a wrong or
    replayed code makes ``valid`` return False instead.
    """


def check_digits(digits: int) -> None:
    if isinstance(digits, bool) or not isinstance(digits, int) or not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidParameter("digits must be an integer between {} and {}".format(MIN_DIGITS, MAX_DIGITS))


def check_interval(interval: int) -> None:
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        raise InvalidParameter("interval must be a positive integer")


def to_unix(value: TimeInput) -> int:
    """
    Normalizes a point in time to whole Unix seconds.

    Integers are taken as Unix seconds. Floats are truncated toward
    zero, and NaN or infinity raise InvalidParameter. Naive
    datetimes are read as UTC, aware ones are converted to UTC first.
    Sub-second precision is dropped.
    """
    if isinstance(value, bool):
        raise TypeError("time must be an int, float or datetime, not bool")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidParameter("time must be a finite number")
        return int(value)
    if isinstance(value, datetime.datetime):
        if value.utcoffset() is None:
            return calendar.timegm(value.timetuple())
        return calendar.timegm(value.utctimetuple())
    raise TypeError("time must be an int, float or datetime, not {}".format(type(value).__name__))


def b32encode(secret: bytes) -> str:
    # The otpauth scheme does not use base32 padding.
    return base64.b32encode(secret).decode("ascii").rstrip("=")


def b32decode(secret: str) -> bytes:
    missing_padding = len(secret) % 8
    if missing_padding != 0:
        secret += "=" * (8 - missing_padding)
    return base64.b32decode(secret, casefold=True)


def build_uri(
    label: str,
    secret: bytes,
    params: Optional[UriParams] = None,
    issuer: Optional[str] = None,
) -> str:
    """
    Returns the provisioning URI for a single free-form label.

    The label is used as given, so ``"Acme:alice"`` keeps its colon.
    Only ``:`` and ``@`` stay literal; other reserved characters such as
    ``/``, ``?``, ``#``, ``&`` and ``=`` are percent-encoded so the label
    cannot spill into the path or the query string.
    Prefer :func:`build_issuer_uri`, which checks the separator.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param label: account label, optionally ``issuer:account``
    :param secret: raw secret bytes, emitted as unpadded base32
    :param params: extra query parameters, emitted in the given order
    :param issuer: the name of the OTP issuer, emitted right after the secret
    :returns: provisioning uri
    """
    return _format_uri(quote(label, safe=":@"), secret, params, issuer)


def build_issuer_uri(
    issuer: str,
    account: str,
    secret: bytes,
    params: Optional[UriParams] = None,
) -> str:
    """
    Returns the provisioning URI for an ``issuer:account`` label.

    -> "otpauth://totp/Acme:alice?secret=MFRGGZA&issuer=Acme"

    The issuer is also added as the ``issuer`` query parameter. Neither
    part may contain a colon, since it separates them in the label.
    """
    if ":" in issuer:
        raise InvalidParameter("issuer must not contain a colon")
    if ":" in account:
        raise InvalidParameter("account must not contain a colon")

    label = quote(issuer, safe="@") + ":" + quote(account, safe="@")
    return _format_uri(label, secret, params, issuer)


def _format_uri(label: str, secret: bytes, params: Optional[UriParams], issuer: Optional[str]) -> str:
    base_uri = "otpauth://totp/{0}?{1}"

    url_args: List[Tuple[str, str]] = [("secret", b32encode(secret))]
    if issuer is not None:
        url_args.append(("issuer", issuer))

    if params is None:
        params = ()
    items = params.items() if isinstance(params, Mapping) else params
    for k, v in items:
        if not isinstance(v, str):
            raise InvalidParameter("All otpauth uri parameters must be strings")
        if k == "secret":
            raise InvalidParameter("secret may not be passed as an extra parameter")
        if k == "issuer" and issuer is not None:
            if v != issuer:
                raise InvalidParameter("If issuer is given both as argument and parameter, it should be equal.")
            continue
        if k == "image":
            image_uri = urlparse(v)
            if image_uri.scheme != "https" or not image_uri.netloc or not image_uri.path:
                raise InvalidParameter("{} is not a valid url".format(v))
        url_args.append((k, v))

    return base_uri.format(label, urlencode(url_args).replace("+", "%20"))


def strings_equal(s1: Union[str, bytes], s2: Union[str, bytes]) -> bool:
    """
    Timing-attack resistant string comparison.

    Normal comparison using == will short-circuit on the first mismatching
    character. compare_digest xors every byte pair and only inspects the
    accumulated result, though we still reveal to a timing attack whether
    the strings are the same length.
    """
    if isinstance(s1, str):
        s1 = s1.encode("utf-8", "surrogatepass")
    if isinstance(s2, str):
        s2 = s2.encode("utf-8", "surrogatepass")
    if not isinstance(s1, bytes) or not isinstance(s2, bytes):
        return False
    return compare_digest(s1, s2)
