"""QR code encoding for share links."""

import io

import segno

from core.config import settings


class SegnoQREncoder:
    """Render a URL as a PNG QR code."""

    def __init__(
        self,
        scale: int = settings.qr_scale,
        border: int = settings.qr_border,
    ) -> None:
        self._scale = scale
        self._border = border

    def encode(self, url: str) -> bytes:
        """Encode ``url`` and return PNG image bytes."""
        qr = segno.make(url, error="m")
        buffer = io.BytesIO()
        qr.save(buffer, kind="png", scale=self._scale, border=self._border)
        return buffer.getvalue()
