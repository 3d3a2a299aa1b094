"""Authentication utilities: password hashing, tokens, session cookie."""

import hashlib
import secrets
from fastapi import HTTPException, Request, Response
from server.config import IS_PRODUCTION, SESSION_COOKIE_NAME, SESSION_MAX_AGE
from server.database import get_db

PBKDF2_ROUNDS = 100_000


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ROUNDS)
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    if not stored_hash or "$" not in stored_hash:
        return False
    salt, expected = stored_hash.split("$", 1)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ROUNDS)
    return secrets.compare_digest(digest.hex(), expected)


def generate_token() -> str:
    return secrets.token_urlsafe(48)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        path="/",
        max_age=SESSION_MAX_AGE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, httponly=True, samesite="lax", path="/")


def get_current_user(request: Request):
    """FastAPI dependency: resolve the session cookie to a user row."""
    session_token = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    db = get_db()
    try:
        user = db.execute(
            "SELECT id, name, email, created_at FROM users WHERE auth_token = ?", (session_token,)
        ).fetchone()
    finally:
        db.close()

    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return dict(user)
