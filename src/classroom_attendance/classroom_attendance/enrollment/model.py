from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Enrollment:
    student_id: int
    course_id: int
    enrolled_at: Optional[datetime] = None
