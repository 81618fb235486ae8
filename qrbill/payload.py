from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from qrbill.data_groups import UltimateCreditor, UltimateDebtor

if TYPE_CHECKING:
    from qrbill.bill import QrBill

LINE_SEPARATOR: Final[str] = "\r\n"


class IncompleteBillError(ValueError):
    pass


def _require(bill: QrBill, name: str) -> Any:
    group = getattr(bill, name)
    if group is None:
        raise IncompleteBillError(f"Missing required data group: {name}")
    return group


def payload_lines(bill: QrBill) -> list[str]:
    header = _require(bill, "header")
    creditor_information = _require(bill, "creditor_information")
    creditor = _require(bill, "creditor")
    payment_amount_information = _require(bill, "payment_amount_information")
    payment_reference = _require(bill, "payment_reference")

    lines: list[str] = []
    lines.extend(header.payload_lines())
    lines.extend(creditor_information.payload_lines())
    lines.extend(creditor.payload_lines())
    lines.extend((bill.ultimate_creditor or UltimateCreditor()).payload_lines())
    lines.extend(payment_amount_information.payload_lines())
    lines.extend((bill.ultimate_debtor or UltimateDebtor()).payload_lines())
    lines.extend(payment_reference.payload_lines())
    lines.append(header.trailer or "")
    for scheme in bill.alternative_schemes:
        lines.extend(scheme.payload_lines())
    return lines


def serialize_bill(bill: QrBill) -> str:
    return LINE_SEPARATOR.join(payload_lines(bill))
