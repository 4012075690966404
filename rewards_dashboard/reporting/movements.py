"""Reporte de movimientos filtrado por rango de fechas."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Sequence

from .classifier import MovementType, classify_movement, resolve_location
from .dates import DateRange, format_display_date, parse_date
from .fields import clean_prize_name, coerce_number, is_cafe_combo
from .merge import MovementSource, fetch_movements
from .models import MovementRecord

logger = logging.getLogger(__name__)

MovementRow = dict[str, Any]
MovementReport = dict[str, Any]


def latest_scraped_at(records: Iterable[MovementRecord]) -> datetime | None:
    """Mayor ``scrapedAt`` interpretable entre ``records`` (``None`` si no hay)."""

    latest = None
    for record in records:
        scraped = parse_date(record.scraped_at)
        if scraped is not None and (latest is None or scraped > latest):
            latest = scraped
    return latest


def _in_range(record: MovementRecord, date_range: DateRange | None) -> bool:
    if date_range is None or not date_range.is_active:
        return True
    occurred = parse_date(record.occurred_at)
    if occurred is None:
        return False
    return date_range.contains(occurred)


def _display_date(raw: Any) -> str:
    parsed = parse_date(raw)
    rendered = format_display_date(parsed) if parsed is not None else None
    if rendered is not None:
        return rendered
    return "" if raw is None else str(raw).strip()


def build_movement_row(record: MovementRecord, last_updated: str | None) -> MovementRow:
    movement_type = classify_movement(record.movement_kind)
    return {
        "id": record.id,
        "date": _display_date(record.occurred_at),
        "prizeName": clean_prize_name(record.reward_description),
        "locationName": resolve_location(
            movement_type, record.origin_location, record.destination_location
        ),
        "type": movement_type.value,
        "quantity": coerce_number(record.quantity),
        "entity": record.entity,
        "rewardRaw": record.reward_description,
        "isCafeCombo": is_cafe_combo(record.reward_description),
        "movement": record.movement_kind,
        "lastUpdated": last_updated,
    }


def build_movement_report(
    records: Sequence[MovementRecord],
    date_range: DateRange | None = None,
) -> MovementReport:
    """Genera las filas del reporte y la marca global de actualización.

    ``lastUpdated`` se calcula sobre todos los registros, antes de aplicar el
    filtro de fechas, y se repite idéntico en cada fila.
    """

    latest = latest_scraped_at(records)
    last_updated = format_display_date(latest) if latest else None

    rows = [
        build_movement_row(record, last_updated)
        for record in records
        if _in_range(record, date_range)
    ]
    if date_range is not None and date_range.is_active:
        logger.debug(
            "Filtro %s: %s de %s movimientos", date_range.describe(), len(rows), len(records)
        )
    return {"rows": rows, "lastUpdated": last_updated}


def summarise_movement_rows(rows: Iterable[MovementRow]) -> dict[str, dict[str, float]]:
    """Cantidad de filas y unidades totales por tipo de movimiento."""

    summary: dict[str, dict[str, float]] = {
        movement_type.value: {"rows": 0, "quantity": 0} for movement_type in MovementType
    }
    for row in rows:
        bucket = summary.setdefault(row["type"], {"rows": 0, "quantity": 0})
        bucket["rows"] += 1
        bucket["quantity"] += row["quantity"]
    return summary


async def generate_movement_report(
    source: MovementSource,
    *,
    date_range: DateRange | None = None,
    period_month: str | None = None,
) -> MovementReport:
    """Une ambos niveles de movimientos y construye el reporte."""

    records = await fetch_movements(source, period_month=period_month)
    return build_movement_report(records, date_range)


__all__ = [
    "build_movement_report",
    "build_movement_row",
    "generate_movement_report",
    "latest_scraped_at",
    "summarise_movement_rows",
]
