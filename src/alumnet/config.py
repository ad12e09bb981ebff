"""Runtime configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr


class ChatSettings(BaseModel):
    """Settings shared by the messaging core and its transports."""

    jwt_secret: SecretStr | None = None
    jwt_algorithm: str = "HS256"
    max_text_length: int = Field(default=1000, gt=0)
    default_page_size: int = Field(default=50, gt=0)
    max_page_size: int = Field(default=100, gt=0)
    clear_typing_on_send: bool = True
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls, prefix: str = "ALUMNET_", environ: Mapping[str, str] | None = None
    ) -> ChatSettings:
        """Build settings from ``{prefix}{FIELD_NAME}`` environment variables.

        List fields are comma-separated. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for name, info in cls.model_fields.items():
            raw = env.get(f"{prefix}{name.upper()}")
            if raw is None:
                continue
            if info.annotation == list[str]:
                values[name] = [part.strip() for part in raw.split(",") if part.strip()]
            else:
                values[name] = raw
        return cls.model_validate(values)
