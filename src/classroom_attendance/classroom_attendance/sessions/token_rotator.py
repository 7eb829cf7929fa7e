from __future__ import annotations

import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..attendance.window import CheckInWindow
from ..common.locks import KeyedLockTable
from ..core.constants import TOKEN_BYTES
from ..core.enums import VerificationMethod, WindowPhase
from ..core.exceptions import ValidationError
from .model import Session, SessionToken
from .repository import SessionRepository, SessionTokenRepository

logger = logging.getLogger(__name__)


class SessionTokenRotator:
    """Mints the short-lived token shown on the instructor's screen."""

    def __init__(
        self,
        tokens: SessionTokenRepository,
        *,
        interval: timedelta,
        token_factory: Callable[[], str] | None = None,
    ):
        if interval <= timedelta(0):
            raise ValidationError("Rotation interval must be positive")
        self._tokens = tokens
        self._interval = interval
        self._token_factory = token_factory or (lambda: secrets.token_urlsafe(TOKEN_BYTES))
        self._locks = KeyedLockTable()

    @property
    def interval(self) -> timedelta:
        return self._interval

    def rotate(self, session: Session, now: datetime) -> SessionToken:
        if session.method != VerificationMethod.TOKEN:
            raise ValidationError("Only token sessions carry a rotating token")

        with self._locks.hold(session.session_id):
            previous = self._tokens.get_current(session.session_id)

            issued_at = now
            serial = 1
            if previous is not None:
                serial = previous.serial + 1
                if issued_at <= previous.issued_at:
                    issued_at = previous.issued_at + timedelta(microseconds=1)

            value = self._new_value(session.session_id)
            token = SessionToken(
                session_id=session.session_id,
                value=value,
                serial=serial,
                issued_at=issued_at,
                expires_at=issued_at + self._interval,
            )
            self._tokens.save_rotation(token, superseded_at=issued_at)

        logger.debug("Rotated token for session %s (serial=%s)", session.session_id, serial)
        return token

    def current_token(self, session: Session, now: datetime) -> SessionToken:
        """Current token, rotating first when there is none or it has expired."""
        token = self._tokens.get_current(session.session_id)
        if token is None or token.is_expired(now):
            return self.rotate(session, now)
        return token

    def _new_value(self, session_id: int) -> str:
        while True:
            value = self._token_factory()
            if self._tokens.find_by_value(session_id, value) is None:
                return value
            logger.warning("Discarding reused token value for session %s", session_id)


class TokenRotationScheduler:
    """Background thread rotating tokens of every running token session."""

    def __init__(
        self,
        rotator: SessionTokenRotator,
        sessions: SessionRepository,
        window: CheckInWindow,
        *,
        clock: Callable[[], datetime],
        interval: Optional[timedelta] = None,
    ):
        self._rotator = rotator
        self._sessions = sessions
        self._window = window
        self._clock = clock
        self._interval = interval or rotator.interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> int:
        """Rotate once for every eligible session; returns how many were rotated."""
        now = self._clock()
        rotated = 0
        for session in self._sessions.list_for_date(now.date()):
            if not session.is_active or session.method != VerificationMethod.TOKEN:
                continue
            phase = self._window.evaluate(session, now).phase
            if phase in (WindowPhase.TOO_EARLY, WindowPhase.CLOSED):
                continue
            try:
                self._rotator.rotate(session, now)
            except Exception:
                logger.exception("Token rotation failed for session %s", session.session_id)
                continue
            rotated += 1
        return rotated

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="token-rotation", daemon=True)
        self._thread.start()
        logger.info("Token rotation scheduler started (every %ss)", self._interval.total_seconds())

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Token rotation tick failed")
            self._stop.wait(self._interval.total_seconds())
