import time
from dataclasses import dataclass
from typing import Optional

import bcrypt
from fastapi import Cookie, Depends, Header, HTTPException
from jose import JWTError, jwt

from shoptube.config import get_settings

ALGORITHM = "HS256"
COOKIE_NAME = "auth-token"
HASURA_CLAIMS = "https://hasura.io/jwt/claims"
ROLES = ("admin", "seller", "customer")


@dataclass
class CurrentUser:
    id: str
    name: str
    email: str
    role: str
    token: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def create_hasura_claims(user: dict) -> dict:
    return {
        HASURA_CLAIMS: {
            "x-hasura-allowed-roles": [user["role"]],
            "x-hasura-default-role": user["role"],
            "x-hasura-user-id": str(user["id"]),
        }
    }


def generate_token(user: dict) -> str:
    settings = get_settings()
    now = int(time.time())
    claims = {
        "sub": str(user["id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user["role"],
        "iat": now,
        "exp": now + settings.jwt_expire_hours * 3600,
        **create_hasura_claims(user),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: Optional[str]) -> Optional[dict]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub") or payload.get("role") not in ROLES:
        return None
    return payload


def _extract_token(authorization: Optional[str], cookie_token: Optional[str]) -> Optional[str]:
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
        return None
    return cookie_token


def _to_user(payload: dict, token: str) -> CurrentUser:
    return CurrentUser(
        id=payload["sub"],
        name=payload.get("name") or "",
        email=payload.get("email") or "",
        role=payload["role"],
        token=token,
    )


def optional_user(
    authorization: Optional[str] = Header(None),
    auth_token: Optional[str] = Cookie(None, alias=COOKIE_NAME),
) -> Optional[CurrentUser]:
    token = _extract_token(authorization, auth_token)
    payload = decode_token(token)
    if payload is None:
        return None
    return _to_user(payload, token)


def verify_token(
    authorization: Optional[str] = Header(None),
    auth_token: Optional[str] = Cookie(None, alias=COOKIE_NAME),
) -> CurrentUser:
    token = _extract_token(authorization, auth_token)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")
    payload = decode_token(token)
    if payload is None:
        raise HTTPException(status_code=401, detail="Invalid or missing token")
    return _to_user(payload, token)


def require_role(*roles: str):
    def dependency(user: CurrentUser = Depends(verify_token)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Unauthorized")
        return user

    return dependency


require_admin = require_role("admin")
require_seller = require_role("seller")
require_customer = require_role("customer")
