import os
from dataclasses import dataclass, field
from typing import List


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    database_url: str = "sqlite:///./customers.db"
    jwt_secret: str = "devsecret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = 10
    movement_max_attempts: int = 5
    # answer 401 instead of 404 when a login email is unknown
    hide_unknown_email: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost"])
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "http://localhost")
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./customers.db"),
            jwt_secret=os.getenv("JWT_SECRET", "devsecret"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            movement_max_attempts=int(os.getenv("MOVEMENT_MAX_ATTEMPTS", "5")),
            hide_unknown_email=_env_bool("HIDE_UNKNOWN_EMAIL"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
