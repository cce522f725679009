from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.config import AppSettings, UnknownProfileError, load_settings
from app.layout_wiring import LayoutEngineRegistry
from domain.models import ALL_DAYS, ShiftRecord
from domain.ports.layout import LayoutRequest
from domain.services.filter_records import (
    ScheduleFilter,
    building_options,
    job_title_options,
    owner_options,
)
from domain.services.normalize_intervals import IntervalNormalizer

logger = logging.getLogger(__name__)

APP_LOGGERS = ("app", "adapters", "domain")


class LayoutRequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    records: List[ShiftRecord] = Field(default_factory=list)
    day_view: str = Field(default=ALL_DAYS, alias="dayView")
    zoom: float = 1.0
    filters: ScheduleFilter = Field(default_factory=ScheduleFilter)


class RecordsBody(BaseModel):
    records: List[ShiftRecord] = Field(default_factory=list)


@dataclass(frozen=True)
class LayoutContext:
    settings: AppSettings
    engines: LayoutEngineRegistry
    normalizer: IntervalNormalizer


def configure_logging(level: str) -> None:
    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)


def create_app(settings: AppSettings) -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title=settings.api.title)
    context = LayoutContext(
        settings=settings,
        engines=LayoutEngineRegistry(settings),
        normalizer=IntervalNormalizer(),
    )
    app.state.layout_context = context

    def get_context(request: Request) -> LayoutContext:
        return request.app.state.layout_context

    def ensure_record_limit(records: List[ShiftRecord]) -> None:
        if len(records) > settings.api.max_records:
            raise HTTPException(
                status_code=413,
                detail=f"Too many records (limit {settings.api.max_records})",
            )

    @app.get("/api/health")
    def api_health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok"})

    @app.get("/api/profiles")
    def api_profiles(context: LayoutContext = Depends(get_context)) -> ORJSONResponse:
        layout_settings = context.settings.layout
        profiles = {
            name: layout_settings.to_layout_config(name).to_dict()
            for name in layout_settings.profile_names()
        }
        return ORJSONResponse(
            {"default": layout_settings.default_profile, "profiles": profiles}
        )

    @app.post("/api/layout")
    def api_layout(
        body: LayoutRequestBody,
        profile: Optional[str] = Query(default=None),
        context: LayoutContext = Depends(get_context),
    ) -> ORJSONResponse:
        ensure_record_limit(body.records)
        try:
            engine = context.engines.get(profile)
        except UnknownProfileError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        request = LayoutRequest(
            records=body.records,
            day_view=body.day_view,
            zoom=body.zoom,
            filters=body.filters,
        )
        try:
            week = engine.build_layout(request)
        except Exception:
            logger.exception("Layout build failed for %d record(s).", len(body.records))
            raise
        return ORJSONResponse(week.to_dict())

    @app.post("/api/validate")
    def api_validate(
        body: RecordsBody, context: LayoutContext = Depends(get_context)
    ) -> ORJSONResponse:
        ensure_record_limit(body.records)
        result = context.normalizer.normalize(body.records)
        payload: dict[str, Any] = {
            "valid": len(result.intervals),
            "rejectedCount": len(result.rejected),
            "rejected": [item.to_dict() for item in result.rejected],
        }
        return ORJSONResponse(payload)

    @app.post("/api/options")
    def api_options(body: RecordsBody) -> ORJSONResponse:
        return ORJSONResponse(
            {
                "owners": owner_options(body.records),
                "buildings": building_options(body.records),
                "jobTitles": job_title_options(body.records),
            }
        )

    return app


app = create_app(load_settings())
