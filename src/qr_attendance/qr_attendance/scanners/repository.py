from __future__ import annotations

from typing import Optional, Protocol

from .model import Scanner


class ScannerRepository(Protocol):
    def get_by_id(self, scanner_id: int) -> Optional[Scanner]:
        raise NotImplementedError
