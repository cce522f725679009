from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from app.config import AppSettings, LayoutSettings
from domain.layout_config import LayoutConfig


def _clear_wsl_env() -> None:
    for key in list(os.environ):
        if key.startswith("WSL_"):
            os.environ.pop(key, None)


_clear_wsl_env()


@pytest.fixture(autouse=True)
def clear_wsl_env() -> Generator[None, None, None]:
    _clear_wsl_env()
    yield
    _clear_wsl_env()


@pytest.fixture
def layout_config() -> LayoutConfig:
    return LayoutConfig()


@pytest.fixture
def layout_settings() -> LayoutSettings:
    return LayoutSettings()


@pytest.fixture
def layout_settings_factory(
    layout_settings: LayoutSettings,
) -> Callable[..., LayoutSettings]:
    def _factory(**overrides: object) -> LayoutSettings:
        return layout_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(layout_settings: LayoutSettings) -> AppSettings:
    return AppSettings(layout=layout_settings)


@pytest.fixture
def app_settings_factory(
    layout_settings_factory: Callable[..., LayoutSettings],
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(layout=layout_settings_factory(**overrides))

    return _factory
