from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from schwifty.exceptions import InvalidChecksumDigits, SchwiftyException

from qrbill.validators import (
    IBAN_LENGTH,
    compact,
    has_valid_charset,
    is_iban_country_allowed,
    is_valid_country_code,
    is_valid_creditor_reference,
    is_valid_qr_reference,
    parse_iban,
)


def _check_charset(value: str) -> str:
    if not has_valid_charset(value):
        raise PydanticCustomError(
            "invalid_characters",
            "Value contains characters outside the QR-bill character set",
        )
    return value


def _check_country(value: str) -> str:
    if not is_valid_country_code(value):
        raise PydanticCustomError(
            "invalid_country",
            "'{value}' is not an ISO 3166 alpha-2 country code",
            {"value": value},
        )
    return value


def _check_iban(value: str) -> str:
    if not is_iban_country_allowed(value):
        raise PydanticCustomError("iban_country", "IBAN must belong to CH or LI")
    if len(compact(value)) != IBAN_LENGTH:
        raise PydanticCustomError(
            "iban_length", "IBAN must be {length} characters long", {"length": IBAN_LENGTH}
        )
    try:
        parse_iban(value)
    except InvalidChecksumDigits:
        raise PydanticCustomError("iban_checksum", "IBAN checksum is invalid")
    except SchwiftyException as exc:
        raise PydanticCustomError("iban_format", "IBAN is malformed: {reason}", {"reason": str(exc)})
    return value


def _text(min_length: int, max_length: int) -> object:
    return Annotated[
        str,
        Field(min_length=min_length, max_length=max_length),
        AfterValidator(_check_charset),
    ]


Name = _text(1, 70)
Street = Optional[_text(0, 70)]
HouseNumber = Optional[_text(0, 16)]
PostalCode = _text(1, 16)
City = _text(1, 35)
AddressLine1 = Optional[_text(0, 70)]
AddressLine2 = _text(1, 70)
Message = Optional[_text(0, 140)]
AlternativeParameter = _text(1, 100)
Country = Annotated[str, Field(min_length=2, max_length=2), AfterValidator(_check_country)]


class _GroupSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class HeaderSchema(_GroupSchema):
    qr_type: Literal["SPC"]
    version: Literal["0100"]
    coding: Literal["1"]
    trailer: Literal["EPD"]


class CreditorInformationSchema(_GroupSchema):
    iban: Annotated[str, Field(min_length=1), AfterValidator(_check_iban)]


class PartySchema(_GroupSchema):
    name: Name
    address_type: Literal["S", "K"]


class StructuredPartySchema(PartySchema):
    address_type: Literal["S"]
    street: Street = None
    house_number: HouseNumber = None
    postal_code: PostalCode
    city: City
    country: Country


class CombinedPartySchema(PartySchema):
    address_type: Literal["K"]
    address_line1: AddressLine1 = None
    address_line2: AddressLine2
    country: Country


class PaymentAmountInformationSchema(_GroupSchema):
    currency: Literal["CHF", "EUR"]
    amount: Optional[
        Annotated[
            Decimal,
            Field(ge=Decimal("0.01"), le=Decimal("999999999.99"), decimal_places=2),
        ]
    ] = None
    due_date: Optional[date] = None


class PaymentReferenceSchema(_GroupSchema):
    type: Literal["QRR", "SCOR", "NON"]
    reference: Optional[Annotated[str, AfterValidator(_check_charset)]] = None
    message: Message = None

    @field_validator("reference")
    @classmethod
    def reference_matches_type(cls, value: str | None, info: ValidationInfo) -> str | None:
        reference_type = info.data.get("type")
        if reference_type == "QRR":
            if not value or not is_valid_qr_reference(value):
                raise PydanticCustomError(
                    "qr_reference",
                    "QR reference must be 27 digits with a valid check digit",
                )
        elif reference_type == "SCOR":
            if not value or not is_valid_creditor_reference(value):
                raise PydanticCustomError(
                    "creditor_reference",
                    "Creditor reference must follow ISO 11649 (RF + check digits)",
                )
        elif reference_type == "NON" and value:
            raise PydanticCustomError(
                "reference_not_allowed",
                "Reference must be empty when reference type is NON",
            )
        return value


class AlternativeSchemeSchema(_GroupSchema):
    name: Optional[str] = None
    instructions: Optional[str] = None
    parameter: AlternativeParameter

    @field_validator("instructions")
    @classmethod
    def instructions_follow_name(cls, value: str | None, info: ValidationInfo) -> str | None:
        if info.data.get("name") and not value:
            raise PydanticCustomError(
                "missing_instructions",
                "Alternative scheme '{name}' has no instructions",
                {"name": info.data["name"]},
            )
        return value
