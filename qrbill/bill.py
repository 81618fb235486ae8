from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from qrbill.data_groups import (
    AlternativeScheme,
    Creditor,
    CreditorInformation,
    Header,
    PaymentAmountInformation,
    PaymentReference,
    UltimateCreditor,
    UltimateDebtor,
    create_header,
)
from qrbill.logger import log_bill_event
from qrbill.payload import serialize_bill
from qrbill.rendering import QrCodeParameters, build_qr_code_parameters
from qrbill.validation import Violation, validate_bill

logger = logging.getLogger(__name__)


@dataclass
class QrBill:
    """Aggregate of the data groups that make up one QR-bill.

    Groups may be assigned in any order and in any state; nothing is checked
    until `validate()` is called. `payload()` serializes whatever is present
    and only fails when a required group is missing altogether.
    """

    header: Header | None = None
    creditor_information: CreditorInformation | None = None
    creditor: Creditor | None = None
    ultimate_creditor: UltimateCreditor | None = None
    payment_amount_information: PaymentAmountInformation | None = None
    ultimate_debtor: UltimateDebtor | None = None
    payment_reference: PaymentReference | None = None
    alternative_schemes: list[AlternativeScheme] = field(default_factory=list)

    @classmethod
    def create(cls) -> "QrBill":
        return cls(header=create_header())

    def validate(self) -> list[Violation]:
        violations = validate_bill(self)
        log_bill_event(
            logger,
            logging.DEBUG,
            "qr bill validated",
            stage="validation",
            violation_count=len(violations),
            outcome="valid" if not violations else "invalid",
        )
        return violations

    def is_valid(self) -> bool:
        return not self.validate()

    def payload(self) -> str:
        return serialize_bill(self)

    def qr_code_parameters(self, *, logo_path: str | Path | None = None) -> QrCodeParameters:
        return build_qr_code_parameters(self, logo_path=logo_path)
