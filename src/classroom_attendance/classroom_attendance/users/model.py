from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a user as seen by the attendance engine.

    Note: Accounts are managed elsewhere; only the fields needed for
    permission checks and department grouping are read here.
    """

    user_id: int
    full_name: str
    email: str
    role: Role
    department: Optional[str] = None
    is_approved: bool = True
