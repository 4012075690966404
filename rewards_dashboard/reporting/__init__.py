"""Conciliación y reportes de movimientos, stock y cafés extraídos por el scraper."""
from __future__ import annotations

from .aggregators import (
    build_prize_rows,
    build_stock_rows,
    build_stock_snapshot,
    calculate_deposit_totals,
    list_prizes,
    summarise_deposit_totals,
)
from .classifier import MovementType, classify_movement, resolve_location
from .dates import (
    DateRange,
    current_period_key,
    format_display_date,
    is_period_key,
    parse_date,
    parse_query_date,
    render_date,
)
from .fields import (
    clean_prize_name,
    coerce_number,
    is_cafe_combo,
    map_entity_to_deposit,
    parse_active,
    parse_number,
)
from .merge import extract_payload_items, fetch_movements, merge_movement_documents
from .models import CoffeeMovement, MovementRecord, PrizeItem
from .movements import (
    build_movement_report,
    generate_movement_report,
    latest_scraped_at,
    summarise_movement_rows,
)
from .pdf import build_movement_report_pdf

__all__ = [
    "CoffeeMovement",
    "DateRange",
    "MovementRecord",
    "MovementType",
    "PrizeItem",
    "build_movement_report",
    "build_movement_report_pdf",
    "build_prize_rows",
    "build_stock_rows",
    "build_stock_snapshot",
    "calculate_deposit_totals",
    "classify_movement",
    "clean_prize_name",
    "coerce_number",
    "current_period_key",
    "extract_payload_items",
    "fetch_movements",
    "format_display_date",
    "generate_movement_report",
    "is_cafe_combo",
    "is_period_key",
    "latest_scraped_at",
    "list_prizes",
    "map_entity_to_deposit",
    "merge_movement_documents",
    "parse_active",
    "parse_date",
    "parse_number",
    "parse_query_date",
    "render_date",
    "resolve_location",
    "summarise_deposit_totals",
    "summarise_movement_rows",
]
