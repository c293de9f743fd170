from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext

from dyc_api import config
from dyc_api.utils import generate_uuid

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_TYPE_POLITICIAN = "politician"
TOKEN_TYPE_ADMIN = "admin"
TOKEN_TYPE_OAUTH_STATE = "oauth_state"


# Hash a password
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Verify a plain password against a hash
def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# Create JWT access token, returns the token and its expiry
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> Tuple[str, datetime]:
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(hours=config.ACCESS_TOKEN_EXPIRE_HOURS)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
    return encoded_jwt, expire


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token. Raises ``JWTError`` when invalid or expired."""
    return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])


def create_politician_token(politician: dict) -> Tuple[str, datetime]:
    return create_access_token({
        "uuid": politician["uuid"],
        "email": politician.get("email"),
        "isCandidato": politician.get("isCandidato", True),
        "type": TOKEN_TYPE_POLITICIAN,
        # one session record per token, so tokens must differ within the same second
        "jti": generate_uuid(),
    })


def create_admin_token(admin: dict) -> Tuple[str, datetime]:
    return create_access_token({
        "uuid": admin["uuid"],
        "username": admin["username"],
        "permissions": admin.get("permissions", []),
        "type": TOKEN_TYPE_ADMIN,
    })


def create_oauth_state(nonce: str) -> str:
    token, _ = create_access_token(
        {"nonce": nonce, "type": TOKEN_TYPE_OAUTH_STATE},
        expires_delta=timedelta(minutes=config.OAUTH_STATE_EXPIRE_MINUTES),
    )
    return token


def verify_oauth_state(state: Optional[str]) -> bool:
    if not state:
        return False
    try:
        payload = decode_access_token(state)
    except JWTError:
        return False
    return payload.get("type") == TOKEN_TYPE_OAUTH_STATE
