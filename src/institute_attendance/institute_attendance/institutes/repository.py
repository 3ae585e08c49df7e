from __future__ import annotations

from typing import Optional, Protocol

from .model import Institute


class InstituteRepository(Protocol):
    """Repository interface for institutes.

    Services depend on this protocol, never on a concrete database.
    """

    def get_by_id(self, institute_id: int) -> Optional[Institute]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Institute]:
        raise NotImplementedError

    def create(self, *, institute_name: str, email: str, password_hash: str) -> int:
        raise NotImplementedError

    def set_email_verified(self, institute_id: int) -> bool:
        raise NotImplementedError
