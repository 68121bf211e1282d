# Overview: Service-layer operations for operator sessions; encapsulates token issue, lookup and revocation.

"""
Operator Session Management

The console signs operators in by display name only (there are no
accounts or passwords). A session exists so that every write can be
attributed to the operator who made it.

- Tokens are 32 random bytes (secrets.token_hex), sent to the client once.
- Only the SHA-256 hash is stored.
- Sessions expire after OPERATOR_SESSION_HOURS and are revoked on logout.
"""

import hashlib
import secrets
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import OperatorSession
from ..time_utils import utcnow
from ..validation import ValidationError


DEFAULT_SESSION_HOURS = 12
MAX_OPERATOR_NAME = 120


def generate_token() -> str:
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def hash_token(token: str) -> str:
    """
    SHA-256 of the plaintext token.

    Tokens are already high-entropy, so a fast hash is enough here.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _session_lifetime() -> timedelta:
    hours = current_app.config.get("OPERATOR_SESSION_HOURS", DEFAULT_SESSION_HOURS)
    return timedelta(hours=int(hours))


def login(name) -> tuple[OperatorSession, str]:
    """
    Open a session for the named operator.

    Returns (session_record, plaintext_token).
    """
    operator_name = str(name or "").strip()
    if not operator_name:
        raise ValidationError("name is required")
    if len(operator_name) > MAX_OPERATOR_NAME:
        raise ValidationError(f"name exceeds max length {MAX_OPERATOR_NAME}")

    plaintext_token = generate_token()
    now = utcnow()
    session = OperatorSession(
        operator_name=operator_name,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        expires_at=now + _session_lifetime(),
        is_revoked=False,
    )
    db.session.add(session)
    db.session.commit()
    return session, plaintext_token


def validate_session(token: str) -> OperatorSession | None:
    """The live session for token, or None if unknown, revoked or expired."""
    if not token:
        return None
    session = db.session.query(OperatorSession).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if session is None:
        return None
    if session.expires_at < utcnow():
        return None
    return session


def logout(token: str) -> bool:
    """Revoke the session. Returns False if it was not active."""
    session = validate_session(token)
    if session is None:
        return False
    session.is_revoked = True
    session.revoked_at = utcnow()
    db.session.commit()
    return True
