from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_users() -> None:
    """Pre-seed demo accounts on import; ``uid`` links to a profile in the store seed."""
    _users["maya"] = {"password_hash": _hash_password("maya123"), "role": "user", "uid": "u-maya"}
    _users["admin"] = {"password_hash": _hash_password("admin123"), "role": "admin", "uid": "u-admin"}


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role, uid}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"], "uid": record["uid"]}
    return None


_seed_users()
