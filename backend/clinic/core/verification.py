import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from clinic.config.settings import settings

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999


def generate_code() -> str:
    """Six-digit numeric code in [100000, 999999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


@dataclass
class _Entry:
    code: str
    expires_at: float


class VerificationCodeStore:
    """
    Process-local map of email -> pending code.

    One code per email: a new `put` replaces whatever was pending for that
    address. Codes older than `ttl_seconds` read as absent and are dropped
    the next time they are looked at. All access goes through one lock.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._codes: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def put(self, email: str, code: str) -> None:
        with self._lock:
            self._codes[email] = _Entry(code=code, expires_at=self._clock() + self._ttl)

    def get(self, email: str) -> Optional[str]:
        with self._lock:
            entry = self._codes.get(email)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._codes[email]
                logger.info(f"Verification code for {email} expired and was discarded")
                return None
            return entry.code

    def matches(self, email: str, code: str) -> bool:
        stored = self.get(email)
        if stored is None or not code:
            return False
        return secrets.compare_digest(stored.encode(), code.encode())

    def remove(self, email: str) -> None:
        with self._lock:
            self._codes.pop(email, None)

    def issue(self, email: str) -> str:
        """Generate a fresh code for `email`, store it and return it."""
        code = generate_code()
        self.put(email, code)
        return code

    def __len__(self) -> int:
        with self._lock:
            return len(self._codes)


_default_store: Optional[VerificationCodeStore] = None
_default_store_lock = threading.Lock()


def get_verification_store() -> VerificationCodeStore:
    """The process-wide store shared by every EmailService instance."""
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            _default_store = VerificationCodeStore(
                ttl_seconds=settings.verification_code_ttl_minutes * 60
            )
        return _default_store
