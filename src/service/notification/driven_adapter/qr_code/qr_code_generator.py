from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from src.service.notification.app.interface.i_qr_code_generator import IQrCodeGenerator


class QrCodeGenerator(IQrCodeGenerator):
    """PNG QR codes, error correction M, 1-module quiet zone, scaled to roughly `target_px`."""

    def __init__(self, *, target_px: int = 300, border: int = 1) -> None:
        self.target_px = target_px
        self.border = border

    def generate_png(self, *, data: str) -> bytes:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=self.border)
        qr.add_data(data)
        qr.make(fit=True)
        qr.box_size = max(1, round(self.target_px / (qr.modules_count + 2 * self.border)))

        buffer = BytesIO()
        qr.make_image(fill_color='black', back_color='white').save(buffer)
        return buffer.getvalue()
