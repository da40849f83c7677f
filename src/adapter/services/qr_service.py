"""qrcode QR Code Service Implementation"""

from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from src.app.services.qr_service import QrCodeService


class PngQrCodeService(QrCodeService):
    """
    Encodes payloads as PNG QR codes with the qrcode library

    The box size is chosen so that the image is close to target_width
    pixels including the quiet zone.
    """

    def __init__(self, target_width: int = 300, border: int = 2):
        self.target_width = target_width
        self.border = border

    def encode_png(self, payload: str) -> bytes:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=self.border)
        qr.add_data(payload)
        qr.make(fit=True)
        qr.box_size = max(1, self.target_width // (qr.modules_count + 2 * self.border))

        image = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        image.save(buffer)
        return buffer.getvalue()
