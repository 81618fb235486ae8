from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

import qrcode
from PIL import Image, ImageDraw

from qrbill.config import Settings
from qrbill.logger import log_bill_event
from qrbill.payload import LINE_SEPARATOR

if TYPE_CHECKING:
    from qrbill.bill import QrBill

DPI: Final[int] = 300

logger = logging.getLogger(__name__)


def mm_to_px(millimeters: float, dpi: int = DPI) -> int:
    return round(millimeters / 25.4 * dpi)


# Recommended dimensions: 46 x 46 mm symbol, 1.6 mm quiet zone, 7 x 7 mm cross.
IMAGE_SIZE_PX: Final[int] = mm_to_px(46)
MARGIN_PX: Final[int] = mm_to_px(1.6)
LOGO_WIDTH_PX: Final[int] = mm_to_px(7)


@dataclass(frozen=True)
class QrCodeParameters:
    payload: str
    size_px: int = IMAGE_SIZE_PX
    margin_px: int = MARGIN_PX
    logo_path: Path | None = None
    logo_width_px: int = LOGO_WIDTH_PX


def build_qr_code_parameters(bill: QrBill, *, logo_path: str | Path | None = None) -> QrCodeParameters:
    return QrCodeParameters(
        payload=bill.payload(),
        logo_path=Path(logo_path) if logo_path is not None else None,
    )


def draw_swiss_cross(width: int) -> Image.Image:
    """Black square with a white cross, framed by a thin white border."""
    logo = Image.new("RGB", (width, width), "white")
    draw = ImageDraw.Draw(logo)
    border = max(1, round(width * 0.06))
    draw.rectangle([border, border, width - 1 - border, width - 1 - border], fill="black")

    inner = width - 2 * border
    arm = inner * 6 / 32
    length = inner * 20 / 32
    center = (width - 1) / 2
    draw.rectangle(
        [center - arm / 2, center - length / 2, center + arm / 2, center + length / 2],
        fill="white",
    )
    draw.rectangle(
        [center - length / 2, center - arm / 2, center + length / 2, center + arm / 2],
        fill="white",
    )
    return logo


def _load_logo(parameters: QrCodeParameters) -> Image.Image:
    width = parameters.logo_width_px
    if parameters.logo_path is None:
        return draw_swiss_cross(width)
    if not parameters.logo_path.exists():
        raise FileNotFoundError(f"Logo file not found: {parameters.logo_path}")
    with Image.open(parameters.logo_path) as source:
        return source.convert("RGBA").resize((width, width), Image.Resampling.LANCZOS)


def render_qr_code(parameters: QrCodeParameters) -> Image.Image:
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=1,
        border=0,
    )
    qr.add_data(parameters.payload)
    qr.make(fit=True)

    inner_size = parameters.size_px - 2 * parameters.margin_px
    symbol = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    symbol = symbol.resize((inner_size, inner_size), Image.Resampling.NEAREST)

    image = Image.new("RGB", (parameters.size_px, parameters.size_px), "white")
    image.paste(symbol, (parameters.margin_px, parameters.margin_px))

    logo = _load_logo(parameters)
    offset = (parameters.size_px - logo.width) // 2
    mask = logo if logo.mode == "RGBA" else None
    image.paste(logo, (offset, offset), mask)
    return image


def render_bill(bill: QrBill, *, settings: Settings | None = None) -> Image.Image:
    active = settings or Settings()
    parameters = build_qr_code_parameters(bill, logo_path=active.logo_path)
    image = render_qr_code(parameters)
    log_bill_event(
        logger,
        logging.INFO,
        "qr code rendered",
        stage="rendering",
        line_count=len(parameters.payload.split(LINE_SEPARATOR)),
        outcome="success",
    )
    return image


def save_qr_code(image: Image.Image, path: str | Path, *, settings: Settings | None = None) -> Path:
    active = settings or Settings()
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    image.save(target, format=active.image_format)
    return target
