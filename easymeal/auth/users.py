from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _public(username: str) -> dict[str, Any]:
    record = _users[username]
    return {
        "username": username,
        "name": record["name"],
        "dietary_restrictions": list(record["dietary_restrictions"]),
    }


def _seed_users() -> None:
    """Pre-seed the demo account."""
    register_user("demo", "demo123", name="Demo Cook")


def register_user(
    username: str,
    password: str,
    name: str | None = None,
) -> dict[str, Any] | None:
    """Create an account. Returns the public profile, or ``None`` if taken."""
    if username in _users:
        return None
    _users[username] = {
        "password_hash": _hash_password(password),
        "name": name or username,
        "dietary_restrictions": [],
    }
    return _public(username)


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username}
    return None


def get_profile(username: str) -> dict[str, Any] | None:
    if username not in _users:
        return None
    return _public(username)


def update_profile(
    username: str,
    *,
    name: str | None = None,
    dietary_restrictions: list[str] | None = None,
) -> dict[str, Any] | None:
    record = _users.get(username)
    if record is None:
        return None
    if name is not None:
        record["name"] = name
    if dietary_restrictions is not None:
        record["dietary_restrictions"] = list(dietary_restrictions)
    return _public(username)


def clear_users() -> None:
    """Drop every account and re-seed the demo user."""
    _users.clear()
    _seed_users()


_seed_users()
