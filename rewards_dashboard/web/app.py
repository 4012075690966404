"""FastAPI application serving the rewards dashboard data."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import ValidationError
from pydantic_settings import BaseSettings

from ..extract_source import DataSourceError, ExtractDataSource
from ..logging_config import configure_logging
from ..reporting import (
    DateRange,
    build_movement_report_pdf,
    build_stock_snapshot,
    calculate_deposit_totals,
    generate_movement_report,
    is_period_key,
    list_prizes,
)
from ..reporting.dates import QUERY_GRAMMAR_ISO, QUERY_GRAMMARS

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    mongo_uri_rewards: str
    extract_db_name: str | None = None
    mongo_server_selection_timeout_ms: int = 5000
    query_date_format: str = QUERY_GRAMMAR_ISO
    log_level: str = "INFO"
    log_file: str | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


app = FastAPI(
    title="Rewards Dashboard",
    description="API de premios, stock y movimientos extraídos por el scraper de recompensas.",
    version="0.1.0",
)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    try:
        settings = Settings()
    except ValidationError as exc:
        missing = {str(err["loc"][0]).upper() for err in exc.errors() if err["type"] == "missing"}
        raise RuntimeError(
            "Faltan variables de entorno requeridas: " + ", ".join(sorted(missing))
        ) from exc
    if settings.query_date_format not in QUERY_GRAMMARS:
        raise RuntimeError(
            f"QUERY_DATE_FORMAT debe ser uno de {', '.join(QUERY_GRAMMARS)}"
        )
    return settings


@lru_cache(maxsize=1)
def get_data_source() -> ExtractDataSource:
    """Create (and cache) the single data-source handle used by every request."""

    settings = get_settings()
    return ExtractDataSource(
        settings.mongo_uri_rewards,
        database=settings.extract_db_name,
        server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
    )


def get_query_date_format() -> str:
    return get_settings().query_date_format


def _date_range(start_date: str | None, end_date: str | None, grammar: str) -> DateRange:
    try:
        return DateRange.from_query(start_date, end_date, grammar)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _period_key(month: str | None) -> str | None:
    cleaned = (month or "").strip()
    if not cleaned:
        return None
    if not is_period_key(cleaned):
        raise HTTPException(
            status_code=400, detail=f"Período inválido: {cleaned}. Formato esperado YYYY-MM"
        )
    return cleaned


def _upstream_failure(message: str, exc: DataSourceError) -> HTTPException:
    logger.exception(message)
    return HTTPException(status_code=500, detail={"message": message, "error": str(exc)})


@app.get("/api/movements")
async def api_movements(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    month: str | None = None,
    grammar: str = Depends(get_query_date_format),
    source: ExtractDataSource = Depends(get_data_source),
) -> list[dict[str, Any]]:
    """Merged current and historical movements, optionally filtered by date."""

    date_range = _date_range(start_date, end_date, grammar)
    period_month = _period_key(month)
    try:
        report = await generate_movement_report(
            source, date_range=date_range, period_month=period_month
        )
    except DataSourceError as exc:
        raise _upstream_failure("Error al obtener movimientos", exc) from exc
    return report["rows"]


@app.get("/api/movements/report.pdf")
async def api_movements_pdf(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    month: str | None = None,
    grammar: str = Depends(get_query_date_format),
    source: ExtractDataSource = Depends(get_data_source),
) -> StreamingResponse:
    date_range = _date_range(start_date, end_date, grammar)
    period_month = _period_key(month)
    try:
        report = await generate_movement_report(
            source, date_range=date_range, period_month=period_month
        )
    except DataSourceError as exc:
        raise _upstream_failure("Error al obtener movimientos", exc) from exc

    pdf_buffer = build_movement_report_pdf(report, date_range=date_range)
    filename = f"movimientos-{datetime.now(timezone.utc):%Y%m%d}.pdf"
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/api/cafes")
async def api_cafes(
    month: str | None = None,
    source: ExtractDataSource = Depends(get_data_source),
) -> list[dict[str, Any]]:
    """Coffee egress totals per deposit for ``month`` (``YYYY-MM``)."""

    period_key = _period_key(month)
    try:
        return await calculate_deposit_totals(source, period_key)
    except DataSourceError as exc:
        raise _upstream_failure("Error al obtener cafés", exc) from exc


@app.get("/api/stocks")
async def api_stocks(
    source: ExtractDataSource = Depends(get_data_source),
) -> list[dict[str, Any]]:
    try:
        return await build_stock_snapshot(source)
    except DataSourceError as exc:
        raise _upstream_failure("Error al obtener stock", exc) from exc


@app.get("/api/prizes")
async def api_prizes(
    source: ExtractDataSource = Depends(get_data_source),
) -> list[dict[str, Any]]:
    try:
        return await list_prizes(source)
    except DataSourceError as exc:
        raise _upstream_failure("Error al obtener premios", exc) from exc


@app.get("/api/health")
def api_health(source: ExtractDataSource = Depends(get_data_source)) -> dict[str, str]:
    if not source.ping():
        raise HTTPException(status_code=503, detail="MongoDB no disponible")
    return {"status": "ok"}


@app.on_event("startup")
def configure_app_logging() -> None:
    """Inicializa el logging global según las variables de entorno."""

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    logger.debug("Logging configurado para la API")


@app.on_event("shutdown")
def close_data_source() -> None:
    if get_data_source.cache_info().currsize:
        get_data_source().close()
    get_data_source.cache_clear()
