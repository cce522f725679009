from __future__ import annotations

from typing import Dict

from adapters.layout.cache import LayoutCache
from adapters.layout.weekly_grid import WeeklyGridLayoutEngine
from app.config import AppSettings
from domain.models import WeekLayout


def build_layout_engine(settings: AppSettings, profile: str | None = None) -> WeeklyGridLayoutEngine:
    config = settings.layout.to_layout_config(profile)
    cache: LayoutCache[WeekLayout] = LayoutCache(settings.layout.cache_size)
    return WeeklyGridLayoutEngine(config, cache=cache)


class LayoutEngineRegistry:
    """One memoizing engine per layout profile, built on first use."""

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        self._engines: Dict[str, WeeklyGridLayoutEngine] = {}

    def get(self, profile: str | None = None) -> WeeklyGridLayoutEngine:
        name = profile or self.settings.layout.default_profile
        engine = self._engines.get(name)
        if engine is None:
            engine = build_layout_engine(self.settings, name)
            self._engines[name] = engine
        return engine
