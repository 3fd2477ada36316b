# app/core/security.py
"""Bearer-token identity resolution and the request guards built on it.

Guards are FastAPI dependencies. They only read state and raise; a route lists
them in the order they must be checked and the first failure decides the response.
"""
from dataclasses import dataclass
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import time, jwt
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import Forbidden, Unauthenticated
from app.db.session import get_db
from app.models.user import User, UserRole
from app.services.users import create_if_absent

DEV_TOKEN_TTL = 60 * 60
bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    email: str
    subject: str


class JWTIdentityVerifier:
    """Verifies tokens minted by the identity provider with a shared key."""

    def __init__(self, secret: str, algorithm: str = "HS256",
                 audience: Optional[str] = None, issuer: Optional[str] = None):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience
        self.issuer = issuer

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token expired")
        except jwt.PyJWTError:
            raise Unauthenticated("Invalid token")
        email = payload.get("email")
        if not email or not isinstance(email, str):
            raise Unauthenticated("Invalid token payload")
        return Identity(email=email, subject=str(payload.get("sub") or email))


def get_identity_verifier() -> JWTIdentityVerifier:
    return JWTIdentityVerifier(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )


def make_token(email: str, subject: Optional[str] = None, ttl: int = DEV_TOKEN_TTL) -> str:
    """Mint a token the default verifier accepts. For local tooling and tests only."""
    now = int(time.time())
    payload = {"email": email, "sub": subject or email, "iat": now, "exp": now + ttl}
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    if settings.jwt_issuer:
        payload["iss"] = settings.jwt_issuer
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def resolve_identity(creds: Optional[HTTPAuthorizationCredentials],
                     verifier: JWTIdentityVerifier) -> Identity:
    if not creds or not creds.credentials:
        raise Unauthenticated("Not authenticated")
    return verifier.verify(creds.credentials)


def get_current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                     verifier: JWTIdentityVerifier = Depends(get_identity_verifier),
                     db: Session = Depends(get_db)) -> User:
    identity = resolve_identity(creds, verifier)
    user, _ = create_if_absent(db, identity.email)
    return user


def get_optional_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                      verifier: JWTIdentityVerifier = Depends(get_identity_verifier),
                      db: Session = Depends(get_db)) -> Optional[User]:
    if not creds:
        return None
    try:
        identity = verifier.verify(creds.credentials)
    except Unauthenticated:
        return None
    return db.query(User).filter(User.email == identity.email).first()


def require_role(*roles):
    role_values = [r.value if isinstance(r, UserRole) else r for r in roles]
    def _dep(user: User = Depends(get_current_user)):
        # exact match; admin does not satisfy a staff-only check
        if user.role.value not in role_values:
            raise Forbidden("forbidden")
        return user
    return _dep


def require_not_blocked(user: User = Depends(get_current_user)) -> User:
    if user.is_blocked:
        raise Forbidden("Your account is blocked")
    return user


def is_owner_or_role(user: User, owner_email: Optional[str], role: UserRole) -> bool:
    return (owner_email is not None and user.email == owner_email) or user.role == role


def ensure_owner_or_role(user: User, owner_email: Optional[str], role: UserRole,
                         message: str = "forbidden") -> None:
    if not is_owner_or_role(user, owner_email, role):
        raise Forbidden(message)


def require_self_or_role(role: UserRole):
    """Passes when the `{email}` path parameter is the caller's own email, or the caller has `role`."""
    def _dep(email: str, user: User = Depends(get_current_user)):
        ensure_owner_or_role(user, email, role)
        return user
    return _dep


def require_self(email: str, user: User = Depends(get_current_user)) -> User:
    if user.email != email:
        raise Forbidden("You can only change your own account")
    return user
