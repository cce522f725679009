from __future__ import annotations

import json
import logging
import os
from dataclasses import fields
from pathlib import Path
from typing import Annotated, Any, ClassVar, Dict, List, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.layout_config import DEFAULT_FONT_STEPS, LayoutConfig

DEFAULT_CONFIG_PATH = Path("config/layout/app.yaml")
DEFAULT_PROFILE = "student_schedule"


class UnknownProfileError(KeyError):
    def __init__(self, profile: str, known: List[str]) -> None:
        super().__init__(profile)
        self.profile = profile
        self.known = known

    def __str__(self) -> str:
        return f"Unknown layout profile {self.profile!r}; known: {', '.join(self.known)}"


def _default_profiles() -> Dict[str, Dict[str, Any]]:
    return {
        DEFAULT_PROFILE: {},
        "building_schedule": {
            "min_event_height_px": 20,
            "base_px_per_hour": 60,
            "max_px_per_hour": 120,
            "column_gap_px": 4.0,
        },
        "student_detail": {
            "min_event_height_px": 24,
            "base_px_per_hour": 108,
            "max_px_per_hour": 108,
            "default_end": 17 * 60,
        },
    }


class LayoutSettings(BaseModel):
    min_event_height_px: int = 44
    base_px_per_hour: int = 56
    max_px_per_hour: int = 220
    min_duration_floor: int = 15
    column_gap_px: float = 6.0
    min_height_pct: float = 3.0
    zoom_min: float = 0.5
    zoom_max: float = 2.5
    zoom_step: float = 0.1
    default_start: int = 8 * 60
    default_end: int = 18 * 60
    earliest_start: int = 6 * 60
    latest_start: int = 9 * 60
    earliest_end: int = 17 * 60
    latest_end: int = 22 * 60
    min_visible_minutes: int = 60
    font_base_px: int = 12
    font_floor_px: int = 10
    font_steps: Annotated[List[Tuple[int, int]], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_FONT_STEPS)
    )
    job_title_min_height_px: float = 52.0
    cache_size: int = Field(default=1, ge=1)
    default_profile: str = DEFAULT_PROFILE
    profiles: Dict[str, Dict[str, Any]] = Field(default_factory=_default_profiles)

    @field_validator("font_steps", mode="before")
    @classmethod
    def normalize_font_steps(cls, value: object) -> object:
        # "44:11,34:10" from env, or a JSON list.
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("["):
                return json.loads(raw)
            steps: List[Tuple[int, int]] = []
            for token in raw.split(","):
                if not token.strip():
                    continue
                threshold, _, size = token.partition(":")
                steps.append((int(threshold), int(size)))
            return steps
        return value

    @field_validator("profiles", mode="before")
    @classmethod
    def normalize_profiles(cls, value: object) -> object:
        if value is None or value == "":
            return _default_profiles()
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError as exc:
                msg = "layout.profiles must be a JSON object"
                raise ValueError(msg) from exc
            value = parsed
        if not isinstance(value, dict):
            msg = "layout.profiles must be a JSON object"
            raise ValueError(msg)
        merged = _default_profiles()
        merged.update({str(name): dict(overrides or {}) for name, overrides in value.items()})
        return merged

    @model_validator(mode="after")
    def check_profiles(self) -> LayoutSettings:
        if self.default_profile not in self.profiles:
            msg = (
                f"layout.default_profile {self.default_profile!r} is not one of: "
                f"{', '.join(self.profile_names())}"
            )
            raise ValueError(msg)
        for name in self.profiles:
            try:
                self.to_layout_config(name)
            except TypeError as exc:
                msg = f"Profile {name!r} has an invalid value: {exc}"
                raise ValueError(msg) from exc
        return self

    def profile_names(self) -> List[str]:
        return sorted(self.profiles)

    def to_layout_config(self, profile: str | None = None) -> LayoutConfig:
        name = profile or self.default_profile
        if name not in self.profiles:
            raise UnknownProfileError(name, self.profile_names())
        base = self.model_dump(exclude={"cache_size", "default_profile", "profiles"})
        overrides = self.profiles[name]
        known = {item.name for item in fields(LayoutConfig)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            msg = f"Profile {name!r} sets unknown layout options: {', '.join(unknown)}"
            raise ValueError(msg)
        base.update(overrides)
        base["font_steps"] = tuple(tuple(step) for step in base["font_steps"])
        return LayoutConfig(**base)


class ApiSettings(BaseModel):
    title: str = "Weekly Schedule Layout"
    max_records: int = Field(default=20000, ge=1)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WSL_", env_nested_delimiter="__")

    layout: LayoutSettings = LayoutSettings()
    api: ApiSettings = ApiSettings()
    log_level: str = "INFO"

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        level = str(value).upper() if value else "INFO"
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value!r}"
            raise ValueError(msg)
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("WSL_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
