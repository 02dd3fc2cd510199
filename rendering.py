import base64
from dataclasses import dataclass
from io import BytesIO

import qrcode
from PIL import Image

PNG_DATA_URL_PREFIX = "data:image/png;base64,"

_ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


class RenderingFailed(RuntimeError):
    pass


@dataclass(frozen=True)
class RenderOptions:
    width: int = 400
    margin: int = 2
    dark: str = "#000000"
    light: str = "#ffffff"
    error_correction: str = "H"


def _generate_qr_png(data: str, options: RenderOptions) -> BytesIO:
    qr = qrcode.QRCode(
        error_correction=_ERROR_CORRECTION[options.error_correction],
        box_size=10,
        border=options.margin,
    )
    qr.add_data(data)
    qr.make(fit=True)

    qr_image = qr.make_image(fill_color=options.dark, back_color=options.light)
    # Nearest keeps module edges sharp when scaling to the target width.
    qr_image = qr_image.get_image().convert("RGB").resize(
        (options.width, options.width), Image.Resampling.NEAREST
    )

    buffer = BytesIO()
    qr_image.save(buffer, format="PNG")
    buffer.seek(0)
    return buffer


def render_data_url(data: str, options: RenderOptions) -> str:
    """Render ``data`` as a QR code and return it as a base64 PNG data URL."""
    try:
        buffer = _generate_qr_png(data, options)
    except Exception as exc:
        raise RenderingFailed(f"could not render QR code: {exc}") from exc
    return PNG_DATA_URL_PREFIX + base64.b64encode(buffer.read()).decode("ascii")
