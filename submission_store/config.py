"""
Store configuration.

Builds the connection configuration from explicit values or from the
environment. Driver options may be supplied either as a mapping or as a JSON
string (the form most deployment tooling hands us).
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

DEFAULT_MONGO_URL = "mongodb://localhost:27017/appserver"


def _normalize_bool(value: Optional[str], default: bool = False) -> bool:
    """Return normalized boolean from environment-style value."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


def _parse_int(env_name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(env_name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %r", env_name, raw, default)
        return default


class DBConfig(BaseModel):
    url: str = DEFAULT_MONGO_URL
    # Driver options, either a mapping or a JSON object encoded as a string
    options: Optional[Union[str, Dict[str, Any]]] = None
    database: Optional[str] = None
    drop_on_connect: bool = False
    ttl: Optional[int] = None
    prefix: str = ""
    collection_cache_size: int = 1

    @field_validator("ttl")
    @classmethod
    def _positive_ttl(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            return None
        return value

    @field_validator("collection_cache_size")
    @classmethod
    def _cache_size_floor(cls, value: int) -> int:
        return max(1, value)

    def client_options(self) -> Dict[str, Any]:
        """Return driver keyword options, decoding a JSON string if needed.

        Raises:
            ValueError: if the string form is not a JSON object.
        """
        if not self.options:
            return {}
        if isinstance(self.options, str):
            options = json.loads(self.options)
            if not isinstance(options, dict):
                raise ValueError("Driver options must be a JSON object")
            return options
        return dict(self.options)

    @classmethod
    def from_env(cls) -> "DBConfig":
        """Build configuration from MONGO_* environment variables."""
        return cls(
            url=os.getenv("MONGO_URL") or DEFAULT_MONGO_URL,
            options=os.getenv("MONGO_OPTIONS") or None,
            database=os.getenv("MONGO_DATABASE") or None,
            drop_on_connect=_normalize_bool(os.getenv("MONGO_DROP_ON_CONNECT"), default=False),
            ttl=_parse_int("MONGO_TTL", None),
            prefix=os.getenv("MONGO_COLLECTION_PREFIX", ""),
            collection_cache_size=_parse_int("MONGO_COLLECTION_CACHE_SIZE", 1) or 1,
        )
