"""
kube_gateway.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue short-lived JWTs for local/dev scenarios and tests.
- Decode and validate JWTs with strict claim requirements (iss/aud/exp/iat/sub).
- Convert validated claims into an `Identity`.

Note:
- Production systems often prefer RS256 + JWKS; HS256 is the default for simplicity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from kube_gateway.auth.models import Identity
from kube_gateway.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    groups: list[str],
    uid: str | None = None,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "uid": uid or subject,
        "groups": groups,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        # jwt.decode enforces signature + registered claims (issuer/audience/exp, etc.).
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


def identity_from_claims(payload: dict[str, Any]) -> Identity:
    subject = str(payload.get("sub", ""))
    if not subject:
        raise JwtValidationError("Invalid token subject")
    groups_raw = payload.get("groups", [])
    if not isinstance(groups_raw, list):
        raise JwtValidationError("Invalid token groups")
    return Identity(
        name=subject,
        uid=str(payload.get("uid") or subject),
        groups=frozenset(str(g) for g in groups_raw),
    )


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by:
# - `api/routers/dev_auth.py` (dev convenience)
# - the test suite, to authenticate requests against the app
