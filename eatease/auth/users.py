from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Over-long or malformed input never matches a stored hash.
        return False


def _public(username: str, record: dict[str, Any]) -> dict[str, Any]:
    return {"username": username, "name": record["name"], "role": record["role"]}


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    _users["diner"] = {
        "password_hash": _hash_password("diner123"),
        "name": "John Doe",
        "role": "diner",
    }
    _users["admin"] = {
        "password_hash": _hash_password("admin123"),
        "name": "Restaurant Admin",
        "role": "admin",
    }


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, name, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return _public(username, record)
    return None


def register(username: str, password: str, name: str) -> dict[str, Any] | None:
    """Create a diner account. Returns ``None`` if the username is taken."""
    if username in _users:
        return None
    _users[username] = {
        "password_hash": _hash_password(password),
        "name": name,
        "role": "diner",
    }
    return _public(username, _users[username])


_seed_users()
