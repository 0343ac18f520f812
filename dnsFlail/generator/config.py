"""Configuration loader for the load generator."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError


class GeneratorConfig(BaseModel):
    pace_ms: float = Field(default=5.0, ge=0)
    report_every: int = Field(default=10, ge=1)
    timeout_seconds: float = Field(default=10.0, gt=0)
    workers: int = Field(default=1, ge=1)
    stats_port: Optional[int] = Field(default=None, ge=0, le=65535)

    @classmethod
    def load(cls, path: str) -> "GeneratorConfig":
        cfg_path = Path(path)
        if not cfg_path.exists():
            raise FileNotFoundError(f"Generator config not found: {cfg_path}")
        try:
            raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
            return cls(**raw)
        except (ValidationError, TypeError, yaml.YAMLError) as exc:
            raise ValueError(f"Invalid generator config: {exc}") from exc

    def with_overrides(self, **overrides: object) -> "GeneratorConfig":
        """Return a copy with every non-None override applied and validated."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return type(self)(**values)
        except ValidationError as exc:
            raise ValueError(f"Invalid generator option: {exc}") from exc

    @property
    def pace_seconds(self) -> float:
        return self.pace_ms / 1000.0
