from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Optional, Protocol

import numpy as np

ImageBuffer = np.ndarray

_handle_ids = count(1)


@dataclass
class StreamHandle:
    """Owned handle to an open camera stream.

    The handle must be given back to ``FrameSource.close`` on every exit path.
    """

    width: int
    height: int
    resource: Any = None
    handle_id: int = field(default_factory=lambda: next(_handle_ids))
    closed: bool = False
    failed_reads: int = 0


class FrameSource(Protocol):
    def open(self) -> StreamHandle:
        """Open the camera; raises CameraPermissionDeniedError / NoCameraDeviceError."""
        raise NotImplementedError

    def next_frame(self, handle: StreamHandle) -> Optional[ImageBuffer]:
        raise NotImplementedError

    def close(self, handle: StreamHandle) -> None:
        """Release the stream. Safe to call more than once."""
        raise NotImplementedError
