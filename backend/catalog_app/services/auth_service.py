# Overview: Admin credential checks (bcrypt) and short-lived admin session tokens.

"""
Admin authentication.

The server keeps only a bcrypt hash of the admin secret. Staff exchange the
secret for a random bearer token; only the SHA-256 digest of a token is
kept, in process memory, until it expires or is revoked.
"""

import hashlib
import re
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta

import bcrypt

from ..time_utils import utcnow
from ..validation import AuthError


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r"[A-Za-z]", password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r"\d", password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Returns True if password matches the bcrypt hash, False otherwise."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash
        return False


def resolve_admin_password_hash(config) -> str:
    """ADMIN_PASSWORD_HASH if set, else a fresh hash of ADMIN_PASSWORD, else ""."""
    configured = config.get("ADMIN_PASSWORD_HASH") or ""
    if configured:
        return configured
    plaintext = config.get("ADMIN_PASSWORD") or ""
    if plaintext:
        return hash_password(plaintext)
    return ""


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass
class AdminSession:
    token_hash: str
    created_at: datetime
    expires_at: datetime


class AdminSessionStore:
    def __init__(self, hours: int = 12):
        self.lifetime = timedelta(hours=hours)
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def create(self) -> tuple[str, AdminSession]:
        """Returns (plaintext_token, session). Only the digest is stored."""
        token = generate_token()
        now = utcnow()
        session = AdminSession(
            token_hash=hash_token(token),
            created_at=now,
            expires_at=now + self.lifetime,
        )
        with self._lock:
            self._purge_expired(now)
            self._sessions[session.token_hash] = session
        return token, session

    def validate(self, token: str) -> bool:
        if not token:
            return False
        digest = hash_token(token)
        with self._lock:
            session = self._sessions.get(digest)
            if session is None:
                return False
            if session.expires_at <= utcnow():
                del self._sessions[digest]
                return False
        return True

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(hash_token(token or ""), None) is not None

    def _purge_expired(self, now: datetime) -> None:
        expired = [k for k, s in self._sessions.items() if s.expires_at <= now]
        for k in expired:
            del self._sessions[k]

    def __len__(self) -> int:
        return len(self._sessions)


def authenticate_admin(password: str, password_hash: str) -> None:
    """Raise AuthError unless password matches the admin hash."""
    if not password_hash:
        raise AuthError("Admin access is not configured")
    if not verify_password(password, password_hash):
        raise AuthError("Invalid admin password")
