from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError

from qrbill.data_groups import REFERENCE_TYPE_QR, DataGroup
from qrbill.validators import is_valid_iban

if TYPE_CHECKING:
    from qrbill.bill import QrBill

REQUIRED_GROUPS: Final[tuple[str, ...]] = (
    "header",
    "creditor_information",
    "creditor",
    "payment_amount_information",
    "payment_reference",
)
OPTIONAL_GROUPS: Final[tuple[str, ...]] = ("ultimate_creditor", "ultimate_debtor")

MAX_ALTERNATIVE_SCHEMES: Final[int] = 2


@dataclass(frozen=True)
class Violation:
    path: str
    code: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"path": self.path, "code": self.code, "message": self.message}


def evaluate_group(group: DataGroup, path: str) -> list[Violation]:
    schema = group.constraint_schema()
    try:
        schema.model_validate(group.constraint_data())
    except ValidationError as exc:
        return [_to_violation(error, path) for error in exc.errors()]
    return []


def _to_violation(error: Any, path: str) -> Violation:
    location = ".".join(str(part) for part in error["loc"])
    return Violation(
        path=f"{path}.{location}" if location else path,
        code=error["type"],
        message=error["msg"],
    )


def evaluate_field_rules(bill: QrBill) -> list[Violation]:
    violations: list[Violation] = []
    for name in (*REQUIRED_GROUPS, *OPTIONAL_GROUPS):
        group = getattr(bill, name)
        if group is not None:
            violations.extend(evaluate_group(group, name))
    for index, scheme in enumerate(bill.alternative_schemes):
        violations.extend(evaluate_group(scheme, f"alternative_schemes.{index}"))
    return violations


def evaluate_business_rules(bill: QrBill) -> list[Violation]:
    violations: list[Violation] = []

    for name in REQUIRED_GROUPS:
        if getattr(bill, name) is None:
            violations.append(
                Violation(
                    path=name,
                    code="missing_data_group",
                    message=f"{name} is required",
                )
            )

    creditor_information = bill.creditor_information
    payment_reference = bill.payment_reference
    if (
        creditor_information is not None
        and payment_reference is not None
        and isinstance(creditor_information.iban, str)
        and is_valid_iban(creditor_information.iban)
    ):
        uses_qr_reference = payment_reference.type == REFERENCE_TYPE_QR
        if creditor_information.is_qr_iban and not uses_qr_reference:
            violations.append(
                Violation(
                    path="payment_reference.type",
                    code="reference_type_mismatch",
                    message="QR-IBAN requires reference type QRR",
                )
            )
        elif not creditor_information.is_qr_iban and uses_qr_reference:
            violations.append(
                Violation(
                    path="payment_reference.type",
                    code="reference_type_mismatch",
                    message="reference type QRR requires a QR-IBAN",
                )
            )

    if len(bill.alternative_schemes) > MAX_ALTERNATIVE_SCHEMES:
        violations.append(
            Violation(
                path="alternative_schemes",
                code="too_many_alternative_schemes",
                message=f"at most {MAX_ALTERNATIVE_SCHEMES} alternative schemes are allowed",
            )
        )

    return violations


def validate_bill(bill: QrBill) -> list[Violation]:
    return [*evaluate_field_rules(bill), *evaluate_business_rules(bill)]
