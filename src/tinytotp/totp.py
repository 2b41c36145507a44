import logging
import time
from typing import Any, List, Mapping, Optional, Tuple, Union

from . import utils
from .otp import OTP
from .utils import InvalidParameter

logger = logging.getLogger(__name__)


class TOTP(OTP):
    """
    Handler for time-based OTP counters.
    """

    def __init__(
        self,
        s: Union[bytes, str],
        digits: int = utils.DEFAULT_DIGITS,
        interval: int = utils.DEFAULT_PERIOD,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        """
        :param s: secret as raw bytes, or in base32 format
        :param digits: number of integers in the OTP, 6 to 10
        :param interval: the time interval in seconds for OTP. This defaults to 30.
        :param name: account name
        :param issuer: issuer
        """
        utils.check_interval(interval)
        self.interval = interval
        super().__init__(s=s, digits=digits, name=name, issuer=issuer)

    def at(self, for_time: utils.TimeInput, counter_offset: int = 0) -> str:
        """
        Accepts either a Unix timestamp integer or a datetime object.

        :param for_time: the time to generate an OTP for
        :param counter_offset: the amount of ticks to add to the time counter
        :returns: OTP value
        """
        return self.generate_otp(self.timecode(for_time) + counter_offset)

    def now(self) -> str:
        """
        Generate the current time OTP

        :returns: OTP value
        """
        return self.at(time.time())

    def verify(
        self,
        otp: Any,
        for_time: Optional[utils.TimeInput] = None,
        since: Optional[utils.TimeInput] = None,
        valid_window: int = 0,
    ) -> bool:
        """
        Verifies the OTP passed in against the current time OTP.

        A candidate that is not a string of exactly ``digits`` characters
        is rejected without computing anything. When ``since`` is given, a
        code is only accepted if its time window is strictly newer than
        the window containing ``since``, so each code can be used once.
        Every failure returns False, whatever the reason.

        :param otp: the OTP to check against
        :param for_time: Time to check OTP at (defaults to now)
        :param since: the last time a code was accepted for this secret
        :param valid_window: extends the validity to this many counter ticks before and after the current one
        :returns: True if verification succeeded, False otherwise
        """
        if isinstance(valid_window, bool) or not isinstance(valid_window, int) or valid_window < 0:
            raise InvalidParameter("valid_window must be a non-negative integer")
        if not isinstance(otp, (str, bytes)) or len(otp) != self.digits:
            return False

        if for_time is None:
            for_time = time.time()
        timecode = self.timecode(for_time)
        consumed = self.timecode(since) if since is not None else None

        # Every window is checked so the running time does not depend on which one matched.
        accepted = False
        for counter in range(timecode - valid_window, timecode + valid_window + 1):
            if counter < 0:
                continue
            matched = utils.strings_equal(otp, self.generate_otp(counter))
            reused = consumed is not None and counter <= consumed
            if matched and reused:
                logger.debug("rejecting reused code: window %d is not after last used window %d", counter, consumed)
            accepted |= matched and not reused
        return accepted

    def remaining(self, for_time: Optional[utils.TimeInput] = None) -> int:
        """Seconds left before the code for ``for_time`` rolls over."""
        if for_time is None:
            for_time = time.time()
        return self.interval - utils.to_unix(for_time) % self.interval

    def provisioning_uri(
        self,
        name: Optional[str] = None,
        issuer_name: Optional[str] = None,
        params: Optional[utils.UriParams] = None,
    ) -> str:
        """
        Returns the provisioning URI for the OTP.  This can then be
        encoded in a QR Code and used to provision an OTP app like
        Google Authenticator.

        Non-default digits and interval are added after the issuer so the
        app computes matching codes.

        See also:
            https://github.com/google/google-authenticator/wiki/Key-Uri-Format

        :param name: name of the user account
        :param issuer_name: the name of the OTP issuer; this will be the
            organization title of the OTP entry in Authenticator
        :param params: other query string parameters to include in the URI
        :returns: provisioning URI
        """
        name = name if name else self.name
        issuer = issuer_name if issuer_name else self.issuer

        url_args: List[Tuple[str, str]] = []
        if self.digits != utils.DEFAULT_DIGITS:
            url_args.append(("digits", str(self.digits)))
        if self.interval != utils.DEFAULT_PERIOD:
            url_args.append(("period", str(self.interval)))
        if params is not None:
            url_args.extend(params.items() if isinstance(params, Mapping) else params)

        if issuer:
            return utils.build_issuer_uri(issuer, name, self.byte_secret(), url_args)
        return utils.build_uri(name, self.byte_secret(), url_args)

    def timecode(self, for_time: utils.TimeInput) -> int:
        """
        Accepts either a timezone naive (UTC) or aware datetime, or a Unix
        timestamp, and returns the moving factor ``floor(unix / interval)``.
        A timestamp that is an exact multiple of the interval starts a new window.
        """
        return utils.to_unix(for_time) // self.interval
