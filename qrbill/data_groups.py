from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Final, Protocol

from pydantic import BaseModel

from qrbill.validators import compact, format_amount, is_qr_iban
from schemas.qr_bill_schema import (
    AlternativeSchemeSchema,
    CombinedPartySchema,
    CreditorInformationSchema,
    HeaderSchema,
    PartySchema,
    PaymentAmountInformationSchema,
    PaymentReferenceSchema,
    StructuredPartySchema,
)

QR_TYPE_SPC: Final[str] = "SPC"
VERSION_0100: Final[str] = "0100"
CODING_LATIN: Final[str] = "1"
TRAILER_EPD: Final[str] = "EPD"

REFERENCE_TYPE_QR: Final[str] = "QRR"
REFERENCE_TYPE_CREDITOR: Final[str] = "SCOR"
REFERENCE_TYPE_NONE: Final[str] = "NON"

CURRENCY_CHF: Final[str] = "CHF"
CURRENCY_EUR: Final[str] = "EUR"

PARTY_LINE_COUNT: Final[int] = 7


class DataGroup(Protocol):
    def constraint_schema(self) -> type[BaseModel]:
        """Return the pydantic model declaring this group's field constraints."""

    def constraint_data(self) -> dict[str, Any]:
        """Return the raw field values the constraint model is evaluated against."""

    def payload_lines(self) -> list[str]:
        """Return this group's slice of the payload, one entry per line."""


def _line(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass
class Header:
    qr_type: str = QR_TYPE_SPC
    version: str = VERSION_0100
    coding: str = CODING_LATIN
    trailer: str = TRAILER_EPD

    def constraint_schema(self) -> type[BaseModel]:
        return HeaderSchema

    def constraint_data(self) -> dict[str, Any]:
        return {
            "qr_type": self.qr_type,
            "version": self.version,
            "coding": self.coding,
            "trailer": self.trailer,
        }

    def payload_lines(self) -> list[str]:
        return [_line(self.qr_type), _line(self.version), _line(self.coding)]


def create_header() -> Header:
    return Header(
        qr_type=QR_TYPE_SPC,
        version=VERSION_0100,
        coding=CODING_LATIN,
        trailer=TRAILER_EPD,
    )


@dataclass
class CreditorInformation:
    iban: str | None = None

    @property
    def is_qr_iban(self) -> bool:
        return isinstance(self.iban, str) and is_qr_iban(self.iban)

    def constraint_schema(self) -> type[BaseModel]:
        return CreditorInformationSchema

    def constraint_data(self) -> dict[str, Any]:
        return {"iban": self.iban}

    def payload_lines(self) -> list[str]:
        if isinstance(self.iban, str):
            return [compact(self.iban).upper()]
        return [_line(self.iban)]


@dataclass
class StructuredAddress:
    street: str | None = None
    house_number: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str | None = None

    address_type: ClassVar[str] = "S"

    def constraint_data(self) -> dict[str, Any]:
        return {
            "address_type": self.address_type,
            "street": self.street,
            "house_number": self.house_number,
            "postal_code": self.postal_code,
            "city": self.city,
            "country": self.country,
        }

    def payload_lines(self) -> list[str]:
        return [
            _line(self.street),
            _line(self.house_number),
            _line(self.postal_code),
            _line(self.city),
            _line(self.country).upper(),
        ]


@dataclass
class CombinedAddress:
    address_line1: str | None = None
    address_line2: str | None = None
    country: str | None = None

    address_type: ClassVar[str] = "K"

    def constraint_data(self) -> dict[str, Any]:
        return {
            "address_type": self.address_type,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "country": self.country,
        }

    def payload_lines(self) -> list[str]:
        # Postal code and city positions stay blank for combined addresses.
        return [
            _line(self.address_line1),
            _line(self.address_line2),
            "",
            "",
            _line(self.country).upper(),
        ]


@dataclass
class Party:
    """A named party with either a structured or a combined address.

    An instance without name and address is the blank placeholder used for
    absent ultimate creditor / ultimate debtor blocks.
    """

    name: str | None = None
    address: StructuredAddress | CombinedAddress | None = None

    @classmethod
    def structured(
        cls,
        name: str | None,
        *,
        street: str | None = None,
        house_number: str | None = None,
        postal_code: str | None = None,
        city: str | None = None,
        country: str | None = None,
    ) -> "Party":
        address = StructuredAddress(
            street=street,
            house_number=house_number,
            postal_code=postal_code,
            city=city,
            country=country,
        )
        return cls(name=name, address=address)

    @classmethod
    def combined(
        cls,
        name: str | None,
        *,
        address_line1: str | None = None,
        address_line2: str | None = None,
        country: str | None = None,
    ) -> "Party":
        address = CombinedAddress(
            address_line1=address_line1,
            address_line2=address_line2,
            country=country,
        )
        return cls(name=name, address=address)

    def constraint_schema(self) -> type[BaseModel]:
        if isinstance(self.address, StructuredAddress):
            return StructuredPartySchema
        if isinstance(self.address, CombinedAddress):
            return CombinedPartySchema
        return PartySchema

    def constraint_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "address_type": None}
        if self.address is not None:
            data.update(self.address.constraint_data())
        return data

    def payload_lines(self) -> list[str]:
        if self.address is None:
            return ["", _line(self.name), "", "", "", "", ""]
        return [self.address.address_type, _line(self.name), *self.address.payload_lines()]


class Creditor(Party):
    pass


class UltimateCreditor(Party):
    pass


class UltimateDebtor(Party):
    pass


@dataclass
class PaymentAmountInformation:
    currency: str | None = None
    amount: Decimal | None = None
    due_date: date | None = None

    def constraint_schema(self) -> type[BaseModel]:
        return PaymentAmountInformationSchema

    def constraint_data(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "amount": self.amount,
            "due_date": self.due_date,
        }

    def payload_lines(self) -> list[str]:
        due_date = self.due_date.isoformat() if isinstance(self.due_date, date) else _line(self.due_date)
        return [format_amount(self.amount), _line(self.currency), due_date]


@dataclass
class PaymentReference:
    type: str | None = None
    reference: str | None = None
    message: str | None = None

    def constraint_schema(self) -> type[BaseModel]:
        return PaymentReferenceSchema

    def constraint_data(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "reference": self.reference,
            "message": self.message,
        }

    def payload_lines(self) -> list[str]:
        reference = compact(self.reference).upper() if isinstance(self.reference, str) else _line(self.reference)
        return [_line(self.type), reference, _line(self.message)]


@dataclass
class AlternativeScheme:
    name: str | None = None
    instructions: str | None = None

    @property
    def parameter(self) -> str:
        if not self.name:
            return _line(self.instructions)
        return f"{self.name};{_line(self.instructions)}"

    def constraint_schema(self) -> type[BaseModel]:
        return AlternativeSchemeSchema

    def constraint_data(self) -> dict[str, Any]:
        return {"name": self.name, "instructions": self.instructions, "parameter": self.parameter}

    def payload_lines(self) -> list[str]:
        return [self.parameter]
