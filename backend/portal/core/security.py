from typing import Optional, Dict, Any
from jose import JWTError, jwt
import secrets

from portal.core.config import settings


def encode_session_token(payload: Dict[str, Any]) -> str:
    """Sign a session payload for storage in the session cookie.

    ``expiresAt`` (epoch milliseconds) is mirrored into the standard ``exp``
    claim so an expired cookie fails signature validation as well.
    """
    to_encode = payload.copy()
    if "expiresAt" in to_encode:
        to_encode["exp"] = int(to_encode["expiresAt"]) // 1000
    return jwt.encode(to_encode, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the signed payload, or None for a tampered, malformed or expired token"""
    try:
        payload = jwt.decode(token, settings.SESSION_SECRET_KEY, algorithms=[settings.SESSION_ALGORITHM])
    except JWTError:
        return None
    payload.pop("exp", None)
    return payload


def generate_otp_code(length: Optional[int] = None) -> str:
    """Uniformly random numeric code, zero-padded to ``length`` digits"""
    length = length or settings.OTP_LENGTH
    return str(secrets.randbelow(10 ** length)).zfill(length)
