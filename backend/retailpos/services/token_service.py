# Overview: Signed session tokens (JWT) carrying the actor's identity claims.

"""
Session tokens are signed claim sets: {id, email, role, store_id, iat, exp}.

The token is the only thing a client presents; require_auth turns its
claims into a validated Actor before any business logic runs.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..errors import AuthenticationError


class TokenService:
    def __init__(self, secret_key: str, *, algorithm: str = "HS256", expires_minutes: int = 1440):
        if not secret_key:
            raise ValueError("A signing key is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = timedelta(minutes=expires_minutes)

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            config.get("JWT_SECRET_KEY") or config["SECRET_KEY"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            expires_minutes=int(config.get("JWT_EXPIRES_MINUTES", 1440)),
        )

    def issue_token(self, user) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "id": user.id,
            "email": user.email,
            "role": user.role,
            "store_id": user.store_id,
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict:
        """Verify signature and expiry; AuthenticationError otherwise."""
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token")
