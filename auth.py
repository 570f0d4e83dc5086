"""
auth.py
-------
Admin authentication: credential check, signed 24 hour tokens carried in an
httpOnly cookie (or a Bearer header), and the guards used by protected page
and API routes.

Tokens are stateless so they survive across serverless invocations. Logout
only deletes the cookie; a copied token stays valid until it expires.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional

from fastapi import Depends, Request, Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings, get_settings
from errors import AuthorizationError, ValidationError
from logging_config import get_logger

logger = get_logger("auth")

LOGIN_PAGE = "/admin/login"

# Use pbkdf2_sha256 to avoid external bcrypt dependency issues
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password.strip())


# =====================
# Credential Verifier
# =====================
class CredentialVerifier:
    def __init__(self, username: str, password: str, password_hash: Optional[str] = None):
        self.username = username.strip()
        self.password = password.strip()
        self.password_hash = password_hash

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialVerifier":
        return cls(settings.admin_username, settings.admin_password, settings.admin_password_hash)

    def verify(self, username: Optional[str], password: Optional[str]) -> bool:
        """True when both trimmed values match the configured admin account.

        Raises ValidationError when either value is missing, which callers
        report as a client error rather than a failed login.
        """
        username = (username or "").strip()
        password = (password or "").strip()
        missing = [name for name, value in (("username", username), ("password", password)) if not value]
        if missing:
            raise ValidationError("Username and password are required", fields=missing)

        username_ok = secrets.compare_digest(username.encode("utf-8"), self.username.encode("utf-8"))
        if self.password_hash:
            password_ok = pwd_context.verify(password, self.password_hash)
        else:
            password_ok = secrets.compare_digest(password.encode("utf-8"), self.password.encode("utf-8"))
        return username_ok and password_ok


# =====================
# Token Issuer
# =====================
class TokenIssuer:
    def __init__(self, secret: str, algorithm: str = "HS256", expire_hours: int = 24):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_delta = timedelta(hours=expire_hours)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(settings.jwt_secret, settings.jwt_algorithm, settings.token_expire_hours)

    def issue(self, identity: str, expires_delta: Optional[timedelta] = None) -> str:
        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": identity,
            "username": identity,
            "authenticated": True,
            "iat": issued_at,
            "exp": issued_at + (expires_delta or self.expires_delta),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def validate(self, token: str) -> Optional[str]:
        """Identity of a well-signed, unexpired token; None for anything else."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.info("Token rejected: %s", exc)
            return None
        if payload.get("authenticated") is not True:
            return None
        return payload.get("sub")


# =====================
# Cookie transport
# =====================
class CookiePolicy:
    def __init__(self, name: str, secure: bool, same_site: str, max_age: int):
        self.name = name
        self.secure = secure
        self.same_site = same_site
        self.max_age = max_age

    def set(self, response: Response, token: str) -> None:
        response.set_cookie(
            self.name,
            token,
            max_age=self.max_age,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite=self.same_site,
        )

    def delete_kwargs(self) -> Dict[str, Any]:
        return {
            "key": self.name,
            "path": "/",
            "secure": self.secure,
            "httponly": True,
            "samesite": self.same_site,
        }

    def revoke(self, response: Response) -> None:
        response.delete_cookie(**self.delete_kwargs())


def get_cookie_policy(request: Request, settings: Settings = Depends(get_settings)) -> CookiePolicy:
    scheme = request.headers.get("x-forwarded-proto", request.url.scheme)
    secure = settings.cookie_secure or scheme == "https"
    # Browsers drop SameSite=None cookies that are not Secure
    same_site = "none" if settings.cross_site_cookies and secure else "lax"
    return CookiePolicy(
        settings.cookie_name,
        secure=secure,
        same_site=same_site,
        max_age=settings.token_expire_hours * 60 * 60,
    )


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


# =====================
# Guards
# =====================
def get_credential_verifier(settings: Settings = Depends(get_settings)) -> CredentialVerifier:
    return CredentialVerifier.from_settings(settings)


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer.from_settings(settings)


class AuthState(NamedTuple):
    identity: Optional[str]
    rejected: bool  # a token was presented but failed validation

    @property
    def authenticated(self) -> bool:
        return self.identity is not None


def get_auth_state(
    request: Request,
    cookies: CookiePolicy = Depends(get_cookie_policy),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthState:
    token = extract_token(request, cookies.name)
    if not token:
        return AuthState(None, False)
    identity = issuer.validate(token)
    return AuthState(identity, identity is None)


def require_admin(
    state: AuthState = Depends(get_auth_state),
    cookies: CookiePolicy = Depends(get_cookie_policy),
) -> str:
    """API guard: 401 envelope, never a redirect."""
    if not state.authenticated:
        raise AuthorizationError(delete_cookie=cookies.delete_kwargs() if state.rejected else None)
    return state.identity


def require_admin_page(
    state: AuthState = Depends(get_auth_state),
    cookies: CookiePolicy = Depends(get_cookie_policy),
) -> str:
    """Page guard: sends the browser to the login page."""
    if not state.authenticated:
        raise AuthorizationError(
            redirect_to=LOGIN_PAGE,
            delete_cookie=cookies.delete_kwargs() if state.rejected else None,
        )
    return state.identity
