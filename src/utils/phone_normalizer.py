"""
Phone Number Normalization Service

Romanian phone numbers as typed into Monday ("0722 123 456", "+40 722-123-456",
"0040722123456", "722123456") normalized to the formats partners expect:
national (0722123456) or E.164 (+40722123456).
"""

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberType
from dataclasses import dataclass
from typing import Optional
from src.utils.observability import logger


@dataclass
class NormalizedPhone:
    """Result of phone normalization."""
    original: str
    e164: str  # +40722123456
    national: str  # 0722123456
    is_mobile: bool


class PhoneNormalizationError(Exception):
    """Raised when a phone number is not a valid Romanian number."""
    pass


class PhoneNormalizer:
    """
    Normalizes Romanian phone numbers.

    Only numbers under country code 40 are accepted; a valid foreign
    number is still an error because every partner API is Romania-only.

    Usage:
        normalizer = PhoneNormalizer()
        result = normalizer.normalize("+40 722 123 456")
        print(result.national)  # "0722123456"
    """

    ROMANIA_COUNTRY_CODE = 40
    DEFAULT_REGION = "RO"

    def normalize(self, phone: Optional[str], mobile_only: bool = False) -> NormalizedPhone:
        """
        Normalize a Romanian phone number.

        Args:
            phone: Phone number in any common format
            mobile_only: Reject fixed-line numbers

        Returns:
            NormalizedPhone with national and E.164 forms

        Raises:
            PhoneNormalizationError: If the number is missing, invalid,
                foreign, or not mobile when mobile_only is set
        """
        if not phone or not str(phone).strip():
            raise PhoneNormalizationError("Phone number is missing")

        original = str(phone)
        cleaned = self._clean_input(original)

        try:
            parsed = phonenumbers.parse(cleaned, self.DEFAULT_REGION)
        except NumberParseException as e:
            raise PhoneNormalizationError(f"Cannot parse phone number '{original}': {e}")

        if parsed.country_code != self.ROMANIA_COUNTRY_CODE:
            raise PhoneNormalizationError(f"Not a Romanian phone number: {original}")

        if not phonenumbers.is_valid_number(parsed):
            raise PhoneNormalizationError(f"Invalid phone number: {original}")

        number_type = phonenumbers.number_type(parsed)
        is_mobile = number_type in (
            PhoneNumberType.MOBILE,
            PhoneNumberType.FIXED_LINE_OR_MOBILE,
        )

        if mobile_only and not is_mobile:
            raise PhoneNormalizationError(f"Not a Romanian mobile number: {original}")

        national_number = str(parsed.national_number)
        result = NormalizedPhone(
            original=original,
            e164=f"+{parsed.country_code}{national_number}",
            national=f"0{national_number}",
            is_mobile=is_mobile,
        )

        logger.debug(f"📞 Normalized phone: {original} -> {result.national}")
        return result

    def _clean_input(self, phone: str) -> str:
        """
        Strip formatting and turn international prefixes into '+'.

        "0040722123456" and "40722123456" become "+40722123456"; a bare
        national number is left for the RO region to resolve.
        """
        stripped = phone.strip()
        digits = "".join(c for c in stripped if c.isdigit())

        if stripped.startswith("+"):
            return "+" + digits
        if digits.startswith("00"):
            return "+" + digits[2:]
        if digits.startswith("40") and len(digits) == 11:
            return "+" + digits
        return digits

    def is_valid(self, phone: Optional[str], mobile_only: bool = False) -> bool:
        """Check if a phone number is a valid Romanian number."""
        try:
            self.normalize(phone, mobile_only=mobile_only)
            return True
        except PhoneNormalizationError:
            return False


# Singleton instance
_normalizer: Optional[PhoneNormalizer] = None


def get_phone_normalizer() -> PhoneNormalizer:
    """Get or create the phone normalizer singleton."""
    global _normalizer
    if _normalizer is None:
        _normalizer = PhoneNormalizer()
    return _normalizer


def to_national(phone: Optional[str], mobile_only: bool = False) -> Optional[str]:
    """
    National format (0722123456), or None if the number is not valid.

    Args:
        phone: Phone number in any format
        mobile_only: Reject fixed-line numbers
    """
    try:
        return get_phone_normalizer().normalize(phone, mobile_only=mobile_only).national
    except PhoneNormalizationError as e:
        logger.info(f"❌ Phone rejected: {e}")
        return None


def to_e164(phone: Optional[str], mobile_only: bool = False) -> Optional[str]:
    """E.164 format (+40722123456), or None if the number is not valid."""
    try:
        return get_phone_normalizer().normalize(phone, mobile_only=mobile_only).e164
    except PhoneNormalizationError as e:
        logger.info(f"❌ Phone rejected: {e}")
        return None
