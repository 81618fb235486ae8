from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from qrbill.bill import QrBill
from qrbill.data_groups import (
    AlternativeScheme,
    Creditor,
    CreditorInformation,
    PaymentAmountInformation,
    PaymentReference,
    UltimateCreditor,
    UltimateDebtor,
)
from qrbill.payload import LINE_SEPARATOR, IncompleteBillError, payload_lines, serialize_bill

BLANK_PARTY = [""] * 7


def _valid_bill() -> QrBill:
    bill = QrBill.create()
    bill.creditor_information = CreditorInformation(iban="CH9300762011623852957")
    bill.creditor = Creditor.structured(
        "Thomas Mustermann",
        street="Musterweg",
        house_number="22a",
        postal_code="1000",
        city="Lausanne",
        country="CH",
    )
    bill.payment_amount_information = PaymentAmountInformation(currency="CHF")
    bill.payment_reference = PaymentReference(type="NON")
    return bill


def test_minimal_bill_payload_layout() -> None:
    expected = [
        "SPC",
        "0100",
        "1",
        "CH9300762011623852957",
        "S",
        "Thomas Mustermann",
        "Musterweg",
        "22a",
        "1000",
        "Lausanne",
        "CH",
        *BLANK_PARTY,
        "",
        "CHF",
        "",
        *BLANK_PARTY,
        "NON",
        "",
        "",
        "EPD",
    ]
    assert _valid_bill().payload() == LINE_SEPARATOR.join(expected)


def test_payload_has_no_trailing_separator() -> None:
    payload = _valid_bill().payload()
    assert not payload.endswith(LINE_SEPARATOR)
    assert payload.count(LINE_SEPARATOR) == 31


def test_fully_populated_bill_payload() -> None:
    bill = _valid_bill()
    bill.creditor_information = CreditorInformation(iban="CH44 3199 9123 0008 8901 2")
    bill.ultimate_creditor = UltimateCreditor.structured(
        "Robert Schneider AG", street="Rue du Lac", house_number="1268", postal_code="2501", city="Biel", country="CH"
    )
    bill.payment_amount_information = PaymentAmountInformation(
        currency="CHF", amount=Decimal("1949.75"), due_date=date(2026, 11, 30)
    )
    bill.ultimate_debtor = UltimateDebtor.combined(
        "Pia-Maria Rutschmann-Schnyder",
        address_line1="Grosse Marktgasse 28",
        address_line2="9400 Rorschach",
        country="CH",
    )
    bill.payment_reference = PaymentReference(
        type="QRR", reference="21 00000 00003 13947 14300 09017", message="Order of 15 June 2026"
    )
    bill.alternative_schemes = [
        AlternativeScheme(name="UV", instructions="UltraPay005;12345"),
        AlternativeScheme(name="XY", instructions="XYService;54321"),
    ]
    assert bill.is_valid()

    lines = payload_lines(bill)

    assert lines[3] == "CH4431999123000889012"
    assert lines[11:18] == ["S", "Robert Schneider AG", "Rue du Lac", "1268", "2501", "Biel", "CH"]
    assert lines[18:21] == ["1949.75", "CHF", "2026-11-30"]
    assert lines[21:28] == [
        "K",
        "Pia-Maria Rutschmann-Schnyder",
        "Grosse Marktgasse 28",
        "9400 Rorschach",
        "",
        "",
        "CH",
    ]
    assert lines[28:31] == ["QRR", "210000000003139471430009017", "Order of 15 June 2026"]
    assert lines[31:] == ["EPD", "UV;UltraPay005;12345", "XY;XYService;54321"]


def test_serialization_is_idempotent() -> None:
    bill = _valid_bill()
    bill.alternative_schemes = [AlternativeScheme(name="UV", instructions="UltraPay005;12345")]
    first = serialize_bill(bill)
    bill.validate()
    second = serialize_bill(bill)
    assert first == second
    assert len(first.split(LINE_SEPARATOR)) == 33


def test_absent_optional_parties_are_not_stored_on_bill() -> None:
    bill = _valid_bill()
    bill.payload()
    assert bill.ultimate_creditor is None
    assert bill.ultimate_debtor is None


def test_invalid_bill_still_serializes() -> None:
    bill = _valid_bill()
    bill.creditor.name = ""
    bill.payment_amount_information.currency = "USD"
    lines = bill.payload().split(LINE_SEPARATOR)
    assert lines[5] == ""
    assert lines[19] == "USD"


@pytest.mark.parametrize(
    "group",
    ["header", "creditor_information", "creditor", "payment_amount_information", "payment_reference"],
)
def test_missing_required_group_raises(group: str) -> None:
    bill = _valid_bill()
    setattr(bill, group, None)
    with pytest.raises(IncompleteBillError, match=group):
        bill.payload()
