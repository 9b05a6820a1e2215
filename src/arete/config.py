"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5-20250929"
    extraction_model: str = "claude-haiku-4-5-20251001"
    timeout: int = 60


@dataclass(frozen=True)
class AnalysisConfig:
    max_job_description_chars: int = 10_000
    timeout_seconds: float = 88.0


@dataclass(frozen=True)
class UsageConfig:
    enabled: bool = True
    db_path: str = "~/.arete/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        analysis=AnalysisConfig(**raw.get("analysis", {})),
        usage=UsageConfig(**raw.get("usage", {})),
    )
