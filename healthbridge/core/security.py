from datetime import datetime, timedelta
from typing import Optional, Dict, Any, NamedTuple
import enum
import hmac
import jwt
from passlib.context import CryptContext
from healthbridge.core.config import settings
from healthbridge.core.exceptions import AuthenticationError

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class PrincipalKind(str, enum.Enum):
    """Token namespaces; each kind is presented in its own request header"""
    USER = "user"
    DOCTOR = "doctor"
    ADMIN = "admin"

    @property
    def header(self) -> str:
        return TOKEN_HEADERS[self]


TOKEN_HEADERS = {
    PrincipalKind.USER: "token",
    PrincipalKind.DOCTOR: "dtoken",
    PrincipalKind.ADMIN: "atoken",
}


class Principal(NamedTuple):
    """An authenticated caller"""
    kind: PrincipalKind
    id: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash"""
    return pwd_context.hash(password)


def secrets_match(supplied: str, expected: str) -> bool:
    """Constant-time comparison for the configured admin credentials"""
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def create_access_token(subject: str, kind: PrincipalKind, data: Optional[Dict[str, Any]] = None) -> str:
    """Create JWT access token bound to a principal kind"""
    to_encode = dict(data or {})
    now = datetime.utcnow()
    to_encode.update({
        "sub": subject,
        "kind": kind.value,
        "iat": now,
    })
    if settings.ACCESS_TOKEN_EXPIRE_MINUTES:
        to_encode["exp"] = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired, login again", error_code="TOKEN_EXPIRED")
    except jwt.PyJWTError:
        raise AuthenticationError(error_code="INVALID_TOKEN")


def verify_token(token: Optional[str], expected_kind: PrincipalKind) -> str:
    """Verify token and check its kind discriminator, returning the principal id"""
    if not token:
        raise AuthenticationError(error_code="MISSING_TOKEN")

    payload = decode_token(token)
    subject = payload.get("sub")
    if payload.get("kind") != expected_kind.value or not subject:
        raise AuthenticationError(error_code="INVALID_TOKEN")

    if expected_kind is PrincipalKind.ADMIN and not secrets_match(subject, settings.ADMIN_EMAIL):
        raise AuthenticationError(error_code="INVALID_TOKEN")

    return subject
