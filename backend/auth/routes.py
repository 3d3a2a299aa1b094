"""Authentication routes: register, login, logout, me."""

import sqlite3
from fastapi import APIRouter, HTTPException, Depends, Response
from server.database import get_db
from auth.utils import (
    hash_password, verify_password, generate_token, get_current_user,
    set_session_cookie, clear_session_cookie,
)
from auth.schemas import RegisterRequest, LoginRequest, AuthResponse
from users.schemas import UserResponse

router = APIRouter()


@router.post("/register", response_model=AuthResponse)
def register(body: RegisterRequest, response: Response):
    email = body.email
    name = body.name
    if len(body.password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")
    if not email or "@" not in email:
        raise HTTPException(status_code=400, detail="Valid email required")
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")

    token = generate_token()
    db = get_db()
    try:
        cursor = db.execute(
            "INSERT INTO users (name, email, password_hash, auth_token) VALUES (?, ?, ?, ?)",
            (name, email, hash_password(body.password), token),
        )
        db.commit()
        user_id = cursor.lastrowid
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=409, detail="Email already registered")
    finally:
        db.close()

    # Token travels only in the HttpOnly cookie
    set_session_cookie(response, token)
    return AuthResponse(user=UserResponse(id=user_id, name=name, email=email))


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, response: Response):
    db = get_db()
    try:
        row = db.execute(
            "SELECT * FROM users WHERE email = ?", (body.email,)
        ).fetchone()
        if not row or not verify_password(body.password, row["password_hash"]):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        token = generate_token()
        db.execute("UPDATE users SET auth_token = ? WHERE id = ?", (token, row["id"]))
        db.commit()
    finally:
        db.close()

    set_session_cookie(response, token)
    return AuthResponse(user=UserResponse(id=row["id"], name=row["name"], email=row["email"]))


@router.post("/logout")
def logout(response: Response, current_user: dict = Depends(get_current_user)):
    db = get_db()
    db.execute("UPDATE users SET auth_token = NULL WHERE id = ?", (current_user["id"],))
    db.commit()
    db.close()

    clear_session_cookie(response)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
def get_me(current_user: dict = Depends(get_current_user)):
    return UserResponse(**{k: current_user[k] for k in UserResponse.model_fields})
