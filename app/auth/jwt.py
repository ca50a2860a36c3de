from typing import Any, Dict

import jwt

from app.core.config import settings


def mint_access(user_id: str) -> str:
    """Only used by tests and local tooling; tokens are issued upstream."""
    return jwt.encode({"sub": user_id, "typ": "access"}, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_token(tok: str) -> Dict[str, Any]:
    return jwt.decode(tok, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
