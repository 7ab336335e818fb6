import jwt
from datetime import datetime, timedelta
from typing import Optional
import logging
import secrets
import os
import uuid

from errors import NotAuthenticated
from models import Role
from permissions import Capabilities, resolve_capabilities

logger = logging.getLogger(__name__)


def get_secret_key():
    env_key = os.getenv("SECRET_KEY")
    if env_key:
        return env_key

    key_file = ".secret_key"
    if os.path.exists(key_file):
        try:
            with open(key_file, "r", encoding='utf-8') as f:
                return f.read().strip()
        except UnicodeDecodeError:
            logger.warning("Secret key file is unreadable, generating a new one")
            os.remove(key_file)

    new_key = secrets.token_urlsafe(32)
    with open(key_file, "w", encoding='utf-8') as f:
        f.write(new_key)
    if os.name != 'nt':
        os.chmod(key_file, 0o600)
    logger.info("Generated a new SECRET_KEY")
    return new_key


SECRET_KEY = get_secret_key()
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))


def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    to_encode.setdefault("jti", uuid.uuid4().hex)
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def verify_token(token: str):
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


class ConsoleSession:
    """Signed-in staff member and the upstream token used on their behalf.

    ``login`` populates the session and ``logout`` clears it; everything else
    only reads it. Capabilities are resolved once, at login.
    """

    def __init__(self):
        self.token: Optional[str] = None
        self.user: Optional[dict] = None
        self.capabilities: Optional[Capabilities] = None
        self.session_id: Optional[str] = None
        self.expires_at: Optional[int] = None

    def login(self, token: str, user: dict, session_id: Optional[str] = None,
              expires_at: Optional[int] = None) -> "ConsoleSession":
        if not token:
            raise NotAuthenticated("Upstream did not return a token")
        try:
            role = Role(user.get("role"))
        except ValueError:
            raise NotAuthenticated(f"Unsupported role: {user.get('role')!r}")
        capabilities = resolve_capabilities(role)

        self.token = token
        self.user = dict(user)
        self.capabilities = capabilities
        self.session_id = session_id or uuid.uuid4().hex
        self.expires_at = expires_at
        return self

    def logout(self) -> None:
        self.token = None
        self.user = None
        self.capabilities = None
        self.session_id = None
        self.expires_at = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def role(self):
        return self.capabilities.role if self.capabilities else None

    def require(self, capability: str, message: Optional[str] = None) -> None:
        if not self.is_authenticated:
            raise NotAuthenticated("Not authenticated")
        self.capabilities.require(capability, message)

    def issue_token(self) -> str:
        if not self.is_authenticated:
            raise NotAuthenticated("Not authenticated")
        return create_access_token({
            "sub": self.user.get("username"),
            "uid": self.user.get("id"),
            "role": self.role.value,
            "name": self.user.get("full_name"),
            "upt": self.token,
            "jti": self.session_id,
        })

    @classmethod
    def from_token(cls, console_token: str) -> "ConsoleSession":
        payload = verify_token(console_token)
        if not payload or not payload.get("upt") or not payload.get("sub"):
            raise NotAuthenticated("Invalid token")
        user = {
            "id": payload.get("uid"),
            "username": payload["sub"],
            "full_name": payload.get("name"),
            "role": payload.get("role"),
        }
        return cls().login(payload["upt"], user, session_id=payload.get("jti"), expires_at=payload.get("exp"))
