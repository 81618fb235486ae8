from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from qrbill.bill import QrBill
from qrbill.config import Settings
from qrbill.data_groups import Creditor, CreditorInformation, PaymentAmountInformation, PaymentReference
from qrbill.rendering import (
    IMAGE_SIZE_PX,
    LOGO_WIDTH_PX,
    MARGIN_PX,
    QrCodeParameters,
    draw_swiss_cross,
    mm_to_px,
    render_bill,
    render_qr_code,
    save_qr_code,
)

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def _bill() -> QrBill:
    bill = QrBill.create()
    bill.creditor_information = CreditorInformation(iban="CH9300762011623852957")
    bill.creditor = Creditor.structured(
        "Thomas Mustermann", street="Musterweg", house_number="22a", postal_code="1000", city="Lausanne", country="CH"
    )
    bill.payment_amount_information = PaymentAmountInformation(currency="CHF")
    bill.payment_reference = PaymentReference(type="NON")
    return bill


def test_layout_constants_follow_300_dpi_recommendations() -> None:
    assert IMAGE_SIZE_PX == 543
    assert MARGIN_PX == 19
    assert LOGO_WIDTH_PX == 83
    assert mm_to_px(25.4) == 300


def test_bill_exposes_qr_code_parameters() -> None:
    bill = _bill()
    parameters = bill.qr_code_parameters()
    assert parameters == QrCodeParameters(payload=bill.payload())
    assert parameters.logo_path is None
    assert bill.qr_code_parameters(logo_path="cross.png").logo_path == Path("cross.png")


def test_render_qr_code_applies_size_margin_and_cross() -> None:
    image = render_qr_code(_bill().qr_code_parameters())

    assert image.size == (IMAGE_SIZE_PX, IMAGE_SIZE_PX)
    assert image.getpixel((0, 0)) == WHITE
    assert image.getpixel((MARGIN_PX - 1, IMAGE_SIZE_PX // 2)) == WHITE

    offset = (IMAGE_SIZE_PX - LOGO_WIDTH_PX) // 2
    center = offset + (LOGO_WIDTH_PX - 1) // 2
    assert image.getpixel((center, center)) == WHITE
    assert image.getpixel((offset + 8, offset + 8)) == BLACK


def test_swiss_cross_has_white_border_and_cross() -> None:
    cross = draw_swiss_cross(LOGO_WIDTH_PX)
    assert cross.size == (LOGO_WIDTH_PX, LOGO_WIDTH_PX)
    assert cross.getpixel((0, 0)) == WHITE
    assert cross.getpixel((8, 8)) == BLACK
    assert cross.getpixel((41, 41)) == WHITE


def test_render_uses_configured_logo(tmp_path: Path) -> None:
    logo_file = tmp_path / "logo.png"
    Image.new("RGBA", (20, 20), (255, 0, 0, 255)).save(logo_file)

    image = render_bill(_bill(), settings=Settings(logo_path=logo_file))

    center = IMAGE_SIZE_PX // 2
    assert image.getpixel((center, center)) == (255, 0, 0)


def test_render_missing_logo_raises(tmp_path: Path) -> None:
    parameters = QrCodeParameters(payload="SPC", logo_path=tmp_path / "missing.png")
    with pytest.raises(FileNotFoundError, match="missing.png"):
        render_qr_code(parameters)


def test_save_qr_code_writes_configured_format(tmp_path: Path) -> None:
    image = render_bill(_bill())
    target = save_qr_code(image, tmp_path / "out" / "bill.jpg", settings=Settings(image_format="JPEG"))
    with Image.open(target) as saved:
        assert saved.format == "JPEG"
        assert saved.size == (IMAGE_SIZE_PX, IMAGE_SIZE_PX)


def test_render_rejects_incomplete_bill() -> None:
    bill = QrBill.create()
    with pytest.raises(ValueError, match="creditor_information"):
        render_bill(bill)
