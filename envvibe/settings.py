from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.models import DEFAULT_PORT_RANGE_END, DEFAULT_PORT_RANGE_START, PortRange


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ENVVIBE_", case_sensitive=False)

    port_range_start: int = DEFAULT_PORT_RANGE_START
    port_range_end: int = DEFAULT_PORT_RANGE_END
    template_name: str = ".env.vibe"
    output_name: str = ".env"
    registry_path: Path = Path.home() / ".envvibe" / "ports.json"
    file_mode: int = 0o644
    release_ports_on_completion: bool = True

    @field_validator("file_mode", mode="before")
    @classmethod
    def _parse_octal_mode(cls, value: object) -> object:
        # Environment values are octal strings, e.g. ENVVIBE_FILE_MODE=0600
        if isinstance(value, str):
            return int(value, 8)
        return value

    def port_range(self) -> PortRange:
        return PortRange(low=self.port_range_start, high=self.port_range_end)
