from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import ActionType
from .model import Token


class TokenRepository(Protocol):
    def get_by_id(self, token_id: int) -> Optional[Token]:
        raise NotImplementedError

    def get_by_secret(self, secret: str) -> Optional[Token]:
        raise NotImplementedError

    def get_for_key(self, *, worker_id: int, work_date: date, action: ActionType) -> Optional[Token]:
        raise NotImplementedError

    def save(
        self,
        *,
        worker_id: int,
        owner_id: int,
        work_date: date,
        action: ActionType,
        secret: str,
        valid_from: datetime,
        valid_until: datetime,
    ) -> Token:
        """Insert, or overwrite the row for (worker, date, action).

        Overwriting clears redeemed_at and the redeeming scanner.
        """

        raise NotImplementedError

    def mark_redeemed(self, *, token_id: int, redeemed_at: datetime, scanner_id: Optional[int] = None) -> bool:
        """Set redeemed_at only if it is currently NULL, as one conditional write.

        Returns True for the single caller that performed the transition.
        """

        raise NotImplementedError

    def release_redemption(self, *, token_id: int, redeemed_at: datetime) -> bool:
        """Undo a mark_redeemed whose ledger write failed.

        Only clears the row if it still carries this exact redeemed_at.
        """

        raise NotImplementedError
