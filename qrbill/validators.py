from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Final

from schwifty import IBAN
from schwifty.exceptions import InvalidStructure, SchwiftyException

from qrbill.countries import IBAN_COUNTRIES, ISO_COUNTRY_CODES

ALLOWED_CHARACTERS: Final[re.Pattern[str]] = re.compile(
    "[\u0020-\u007e\u00a0-\u017f\u0218-\u021b\u20ac]*"
)

IBAN_LENGTH: Final[int] = 21
QR_IID_RANGE: Final[range] = range(30000, 32000)

# Reference and account fields are restricted to ASCII digits and letters.
_ALPHANUMERIC = re.compile(r"[A-Z0-9]+", re.ASCII)
_QR_IID_SHAPE = re.compile(r"[0-9]{5}", re.ASCII)
_QR_REFERENCE_SHAPE = re.compile(r"[0-9]{27}", re.ASCII)
_QR_REFERENCE_NUMBER = re.compile(r"[0-9]{1,26}", re.ASCII)
_CREDITOR_REFERENCE_SHAPE = re.compile(r"RF[0-9]{2}[A-Z0-9]{1,21}", re.ASCII)
_CREDITOR_REFERENCE_BODY = re.compile(r"[A-Z0-9]{1,21}", re.ASCII)

# Recursive modulo 10 carry table.
_MOD10_TABLE: Final[tuple[int, ...]] = (0, 9, 4, 6, 8, 2, 7, 1, 3, 5)


def compact(value: str) -> str:
    return re.sub(r"\s+", "", value)


def has_valid_charset(value: str) -> bool:
    return ALLOWED_CHARACTERS.fullmatch(value) is not None


def is_valid_country_code(value: str) -> bool:
    return value.upper() in ISO_COUNTRY_CODES


def is_iban_country_allowed(value: str) -> bool:
    return compact(value).upper()[:2] in IBAN_COUNTRIES


def parse_iban(value: str) -> IBAN:
    """Parse an IBAN with schwifty; raises a SchwiftyException when it is malformed."""
    iban = compact(value).upper()
    if _ALPHANUMERIC.fullmatch(iban) is None:
        raise InvalidStructure(f"Invalid characters in IBAN {value!r}")
    return IBAN(iban)


def is_valid_iban(value: str) -> bool:
    if not is_iban_country_allowed(value) or len(compact(value)) != IBAN_LENGTH:
        return False
    try:
        parse_iban(value)
    except SchwiftyException:
        return False
    return True


def is_qr_iban(value: str) -> bool:
    """A QR-IBAN carries an institution id in the QR-IID range 30000-31999."""
    try:
        iban = parse_iban(value)
    except SchwiftyException:
        return False
    if iban.country_code not in IBAN_COUNTRIES or _QR_IID_SHAPE.fullmatch(iban.bank_code) is None:
        return False
    return int(iban.bank_code) in QR_IID_RANGE


def qr_reference_check_digit(digits: str) -> str:
    carry = 0
    for ch in digits:
        carry = _MOD10_TABLE[(carry + int(ch)) % 10]
    return str((10 - carry) % 10)


def is_valid_qr_reference(value: str) -> bool:
    reference = compact(value)
    if _QR_REFERENCE_SHAPE.fullmatch(reference) is None:
        return False
    return qr_reference_check_digit(reference[:26]) == reference[26]


def create_qr_reference(number: str) -> str:
    digits = compact(number)
    if _QR_REFERENCE_NUMBER.fullmatch(digits) is None:
        raise ValueError("QR reference number must be 1-26 digits")
    body = digits.zfill(26)
    return body + qr_reference_check_digit(body)


def _mod97(text: str) -> int:
    digits = "".join(str(int(ch, 36)) for ch in text)
    return int(digits) % 97


def is_valid_creditor_reference(value: str) -> bool:
    reference = compact(value).upper()
    if _CREDITOR_REFERENCE_SHAPE.fullmatch(reference) is None:
        return False
    return _mod97(reference[4:] + reference[:4]) == 1


def create_creditor_reference(body: str) -> str:
    """Build an ISO 11649 reference (RFxx...) for an alphanumeric body."""
    text = compact(body).upper()
    if _CREDITOR_REFERENCE_BODY.fullmatch(text) is None:
        raise ValueError("Creditor reference body must be 1-21 alphanumeric characters")
    check = 98 - _mod97(text + "RF00")
    return f"RF{check:02d}{text}"


def format_amount(amount: Any) -> str:
    if amount is None:
        return ""
    try:
        return f"{Decimal(str(amount)):.2f}"
    except InvalidOperation:
        return str(amount)
