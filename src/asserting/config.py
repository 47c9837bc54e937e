from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class CaseConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    target: str
    args: dict[str, Any] = {}

    @field_validator("target")
    @classmethod
    def target_must_name_attribute(cls, v: str) -> str:
        module, sep, attr = v.partition(":")
        if not sep or not module or not attr:
            raise ValueError(f"target '{v}' must have the form 'module:attribute'")
        return v

    @field_validator("name")
    @classmethod
    def no_commas_in_case_name(cls, v: str) -> str:
        if "," in v:
            raise ValueError(f"Case name '{v}' must not contain a comma")
        return v


class SuiteConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    paths: list[str] = []
    stop_on_failure: bool = False
    cases: list[CaseConfig]

    @field_validator("cases")
    @classmethod
    def cases_must_not_be_empty(cls, v: list[CaseConfig]) -> list[CaseConfig]:
        if not v:
            raise ValueError("cases must not be empty")
        return v

    @model_validator(mode="after")
    def case_names_must_be_unique(self) -> SuiteConfig:
        names = [c.name for c in self.cases]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate case names: {', '.join(duplicates)}")
        return self


def load_config(path: Path) -> SuiteConfig:
    """Load and validate a suite config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = SuiteConfig(**raw)

    # Resolve relative import roots relative to config file location
    config.paths = [
        p if Path(p).is_absolute() else str((config_dir / p).resolve())
        for p in config.paths
    ]

    return config
