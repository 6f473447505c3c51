"""Domain models for template rendering inputs and results."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PORT_RANGE_START = 1024
DEFAULT_PORT_RANGE_END = 65535


class PortRange(BaseModel):
    """Inclusive bounds on allocatable port numbers.

    Port 0 is excluded: binding it asks the OS for an ephemeral port, so it
    would always pass the availability probe.
    """

    model_config = ConfigDict(frozen=True)

    low: int = Field(
        default=DEFAULT_PORT_RANGE_START, ge=1, le=65535, description="Lowest port"
    )
    high: int = Field(
        default=DEFAULT_PORT_RANGE_END, ge=1, le=65535, description="Highest port"
    )

    @model_validator(mode="after")
    def _check_order(self) -> PortRange:
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must not exceed high ({self.high})")
        return self

    def __contains__(self, port: object) -> bool:
        return isinstance(port, int) and self.low <= port <= self.high

    def __str__(self) -> str:
        return f"{self.low}-{self.high}"


class RenderResult(BaseModel):
    """Outcome of a single render pass.

    The model is frozen and holds its own copy of the port mapping, so later
    changes to the dict passed in do not leak into the result. The mapping
    itself is a plain dict; callers should treat it as read-only.
    """

    model_config = ConfigDict(frozen=True)

    processed_content: str = Field(..., description="Template text with placeholders replaced")
    assigned_ports: dict[str, int] = Field(
        default_factory=dict, description="Environment variable name to assigned port"
    )

    @field_validator("assigned_ports", mode="after")
    @classmethod
    def _copy_ports(cls, value: dict[str, int]) -> dict[str, int]:
        return dict(value)

    def assigned_ports_json(self) -> str:
        """Serialize assigned ports as a JSON object, e.g. {"WEB_PORT": 3000}."""
        return json.dumps(self.assigned_ports)
