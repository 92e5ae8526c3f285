import base64
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_M


def generate_qr_base64(data: str, box_size: int = 10) -> str:
    """Render ``data`` as a PNG QR code and return it base64-encoded."""
    qr = qrcode.QRCode(
        version=None, box_size=box_size, border=4,
        error_correction=ERROR_CORRECT_M
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = BytesIO()
    img.save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode()
