from typing import Optional, Union

from . import hotp, utils


class OTP(object):
    """
    Base class for OTP handlers.
    """

    def __init__(
        self,
        s: Union[bytes, str],
        digits: int = utils.DEFAULT_DIGITS,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        utils.check_digits(digits)
        if not isinstance(s, (bytes, bytearray, str)):
            raise TypeError("secret must be bytes or a base32 string")
        self.digits = digits
        self.secret = s
        self.name = name or "Secret"
        self.issuer = issuer

    def generate_otp(self, input: int) -> str:
        """
        :param input: the HMAC counter value to use as the OTP input.
            Usually the computed integer based on the Unix timestamp
        """
        return hotp.hotp_code(self.byte_secret(), input, self.digits)

    def byte_secret(self) -> bytes:
        if isinstance(self.secret, str):
            return utils.b32decode(self.secret)
        return bytes(self.secret)
