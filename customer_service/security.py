from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from .errors import AuthenticationError


class CredentialService:
    """Password hashing and bearer token handling."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60, bcrypt_rounds: int = 10):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.pwd = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds)

    def hash_password(self, password: str) -> str:
        return self.pwd.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return self.pwd.verify(password, password_hash)

    def create_token(self, customer_id: str, name: str) -> str:
        exp = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        return jwt.encode({"sub": customer_id, "username": name, "exp": exp}, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """Return the token claims; any failure is reported as a bare 401."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise AuthenticationError()
        if not payload.get("sub"):
            raise AuthenticationError()
        return payload
