from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import cv2
import numpy as np
from pyzbar.pyzbar import ZBarSymbol
from pyzbar.pyzbar import decode as pyzbar_decode

logger = logging.getLogger(__name__)


class QRDecoder(Protocol):
    def decode(self, image: Any) -> Optional[str]:
        raise NotImplementedError


class PyzbarQRDecoder:
    """Decode the first QR symbol in a frame with zbar.

    Frames without a code, empty frames and malformed buffers all come back as
    None; callers treat every failure as a miss.
    """

    def decode(self, image: Any) -> Optional[str]:
        if image is None:
            return None
        try:
            if isinstance(image, np.ndarray):
                if image.size == 0:
                    return None
                if image.ndim == 3:
                    image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
            results = pyzbar_decode(image, symbols=[ZBarSymbol.QRCODE])
        except Exception as e:
            logger.warning("QR decode failed, treating frame as a miss: %s", e)
            return None

        for symbol in results:
            text = symbol.data.decode("utf-8", errors="ignore").strip("\x00").strip()
            if text:
                return text
        return None
