import os
from typing import List, Optional

import dotenv
from pydantic import BaseModel

dotenv.load_dotenv(dotenv_path=".env")


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name, "")
    try:
        return int(value) if value.strip() else default
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name, "")
    try:
        return float(value) if value.strip() else default
    except ValueError:
        return default


class Settings(BaseModel):
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model_name: str = "gpt-4o"
    vision_model_name: str = "gpt-4o"
    gateway_timeout: float = 20.0
    history_max_sessions: int = 1000
    history_max_entries: int = 50
    allowed_origins: List[str] = []
    log_level: str = "INFO"

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        origins_env = os.getenv("ALLOWED_ORIGINS", "")
        origins = [o.strip() for o in origins_env.split(",") if o.strip()]
        return cls(
            api_key=(os.getenv("OPENAI_API_KEY") or "").strip() or None,
            base_url=(os.getenv("OPENAI_BASE_URL") or "").strip() or None,
            model_name=os.getenv("MODEL_NAME") or "gpt-4o",
            vision_model_name=os.getenv("VISION_MODEL_NAME") or "gpt-4o",
            gateway_timeout=_float_env("GATEWAY_TIMEOUT_SECONDS", 20.0),
            history_max_sessions=_int_env("HISTORY_MAX_SESSIONS", 1000),
            history_max_entries=_int_env("HISTORY_MAX_ENTRIES", 50),
            allowed_origins=origins,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
