from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Read-only view of the account directory.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def departments_for(self, user_ids: Iterable[int]) -> Mapping[int, Optional[str]]:
        """Declared department of each user; unknown users map to None."""

        raise NotImplementedError

    def get_department(self, user_id: int) -> Optional[str]:
        raise NotImplementedError
