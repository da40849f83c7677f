"""QR Code Service Interface"""

from abc import ABC, abstractmethod


class QrCodeService(ABC):
    """Encodes a text payload into a scannable image"""

    @abstractmethod
    def encode_png(self, payload: str) -> bytes:
        """
        Encode payload as a PNG QR code

        Args:
            payload: Text to encode

        Returns:
            PNG image bytes
        """
        pass
