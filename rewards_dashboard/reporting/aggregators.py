"""Agregados por depósito: egresos de café, stock por premio y catálogo."""
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Iterable, Protocol, Sequence

from .dates import current_period_key, render_date
from .fields import (
    DEPOSIT_BETTICA,
    DEPOSIT_GRUPO_GEN,
    DEPOSIT_MONTEVERDE,
    DEPOSIT_TOBAGO,
    coerce_number,
    map_entity_to_deposit,
    parse_active,
    parse_number,
)
from .models import CoffeeMovement, PrizeItem

logger = logging.getLogger(__name__)

Document = dict[str, Any]

# Identificador público y depósito de cada fila del reporte de cafés.
COFFEE_DEPOSITS: tuple[tuple[str, str], ...] = (
    ("monteverde", DEPOSIT_MONTEVERDE),
    ("bettica", DEPOSIT_BETTICA),
    ("tobago1", DEPOSIT_TOBAGO),
)

# Campo de stock del catálogo para cada depósito.
STOCK_FIELDS: tuple[tuple[str, str], ...] = (
    (DEPOSIT_GRUPO_GEN, "stock_grupogen"),
    (DEPOSIT_MONTEVERDE, "stock_monteverde"),
    (DEPOSIT_BETTICA, "stock_bettica"),
    (DEPOSIT_TOBAGO, "stock_tobago1"),
)

# Combos de café que se cargan como premio compuesto y no tienen stock propio.
EXCLUDED_STOCK_DESCRIPTIONS = frozenset(
    {
        "CAFE + FACTURA O ALFAJOR",
        "CAFE CHICO PARA LLEVAR + 2 FACTURAS",
        "CANJE CAFE + ALFAJOR",
        "GASEOSA + ALFAJOR",
    }
)


class CoffeeSource(Protocol):
    def fetch_current_coffee_movements(self) -> Sequence[Document]: ...

    def fetch_historical_coffee_movements(self, period_key: str) -> Sequence[Document]: ...


class CatalogSource(Protocol):
    def fetch_catalog_items(self) -> Sequence[Document]: ...

    def fetch_latest_catalog_timestamp(self) -> Any | None: ...


def _models(model: type, documents: Iterable[Any]) -> list:
    return [model.model_validate(doc) for doc in documents if isinstance(doc, dict)]


def summarise_deposit_totals(documents: Iterable[Any]) -> list[dict[str, Any]]:
    """Suma las cantidades egresadas por depósito.

    Siempre devuelve las tres filas fijas, aunque un depósito no tenga egresos.
    Las entradas cuya cantidad no es numérica se omiten.
    """

    totals: dict[str, float] = defaultdict(float)
    skipped = 0
    for movement in _models(CoffeeMovement, documents):
        for egress in movement.egresses:
            quantity = parse_number(egress.quantity) if egress.quantity is not None else 0
            if quantity is None:
                skipped += 1
                continue
            totals[map_entity_to_deposit(egress.entity)] += quantity
    if skipped:
        logger.debug("Omitidos %s egresos de café con cantidad no numérica", skipped)

    return [
        {
            "id": deposit_id,
            "locationName": deposit,
            "totalQuantity": coerce_number(totals.get(deposit, 0)),
        }
        for deposit_id, deposit in COFFEE_DEPOSITS
    ]


async def calculate_deposit_totals(
    source: CoffeeSource,
    period_key: str | None = None,
    *,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Totales por depósito para ``period_key`` (``YYYY-MM``, mes actual por defecto).

    El mes en curso se lee de la colección viva; los anteriores, del histórico.
    """

    current_key = current_period_key(now)
    period_key = (period_key or "").strip() or current_key
    if period_key == current_key:
        documents = await asyncio.to_thread(source.fetch_current_coffee_movements)
    else:
        documents = await asyncio.to_thread(
            source.fetch_historical_coffee_movements, period_key
        )
    logger.info("Cafés %s: %s documentos", period_key, len(documents))
    return summarise_deposit_totals(documents)


def build_stock_rows(items: Iterable[Any], last_updated: str | None) -> list[dict[str, Any]]:
    """Una fila por premio y depósito, excluyendo los combos de café."""

    rows: list[dict[str, Any]] = []
    for item in _models(PrizeItem, items):
        name = item.display_name
        if name.strip().upper() in EXCLUDED_STOCK_DESCRIPTIONS:
            continue
        for location, field in STOCK_FIELDS:
            rows.append(
                {
                    "id": f"{item.id}-{location}",
                    "prizeName": name,
                    "locationName": location,
                    "quantity": coerce_number(getattr(item, field)),
                    "minQuantity": 0,
                    "lastUpdated": last_updated,
                }
            )
    return rows


async def build_stock_snapshot(source: CatalogSource) -> list[dict[str, Any]]:
    items, latest = await asyncio.gather(
        asyncio.to_thread(source.fetch_catalog_items),
        asyncio.to_thread(source.fetch_latest_catalog_timestamp),
    )
    return build_stock_rows(items, render_date(latest))


def build_prize_rows(items: Iterable[Any]) -> list[dict[str, Any]]:
    return [
        {
            "id": item.id,
            "name": item.display_name,
            "category": item.category,
            "defaultPurchasePrice": coerce_number(item.cost),
            "points": coerce_number(item.points),
            "active": parse_active(item.status),
            "scrapedAt": render_date(item.scraped_at) or "",
        }
        for item in _models(PrizeItem, items)
    ]


async def list_prizes(source: CatalogSource) -> list[dict[str, Any]]:
    items = await asyncio.to_thread(source.fetch_catalog_items)
    return build_prize_rows(items)


__all__ = [
    "COFFEE_DEPOSITS",
    "EXCLUDED_STOCK_DESCRIPTIONS",
    "STOCK_FIELDS",
    "build_prize_rows",
    "build_stock_rows",
    "build_stock_snapshot",
    "calculate_deposit_totals",
    "list_prizes",
    "summarise_deposit_totals",
]
