"""Unificación de movimientos vivos e históricos en una sola secuencia."""
from __future__ import annotations

import asyncio
import logging
from itertools import chain
from typing import Any, Callable, Iterable, Iterator, Protocol, Sequence

from .models import MovementRecord

logger = logging.getLogger(__name__)

Document = dict[str, Any]

_PAYLOAD_KEYS = ("data", "payload")
_ID_FIELDS = ("_id", "id")
_WRAPPER_TIMESTAMP_FIELDS = ("scrapedAt", "seenAt", "expiresAt")


class MovementSource(Protocol):
    def fetch_current_movements(self) -> Sequence[Document]: ...

    def fetch_historical_movements(self, period_month: str | None = None) -> Sequence[Document]: ...


def _list_at(key: str | None) -> Callable[[Any], list | None]:
    def matcher(payload: Any) -> list | None:
        candidate = payload if key is None else (
            payload.get(key) if isinstance(payload, dict) else None
        )
        return candidate if isinstance(candidate, list) else None

    return matcher


# Formas conocidas del payload histórico, en orden de prioridad.
PAYLOAD_SHAPES: tuple[tuple[str, Callable[[Any], list | None]], ...] = (
    ("array", _list_at(None)),
    ("items", _list_at("items")),
    ("rows", _list_at("rows")),
    ("movements", _list_at("movements")),
)


def _wrapper_payload(wrapper: Document) -> Any:
    for key in _PAYLOAD_KEYS:
        if wrapper.get(key) is not None:
            return wrapper[key]
    return None


def extract_payload_items(payload: Any) -> list[Any]:
    """Devuelve la primera lista no vacía según :data:`PAYLOAD_SHAPES`."""

    for name, matcher in PAYLOAD_SHAPES:
        items = matcher(payload)
        if items:
            logger.debug("Payload histórico con forma %s (%s elementos)", name, len(items))
            return items
    return []


def _first_present(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, str) and not candidate.strip():
            continue
        return candidate
    return None


def _native_id(document: Document) -> str | None:
    value = _first_present(*(document.get(field) for field in _ID_FIELDS))
    return str(value).strip() if value is not None else None


def iter_history_records(wrapper: Document) -> Iterator[MovementRecord]:
    """Expande un documento histórico en sus movimientos individuales."""

    wrapper_id = _native_id(wrapper) or "unknown"
    items = extract_payload_items(_wrapper_payload(wrapper))
    if not items:
        logger.debug("Documento histórico %s sin movimientos reconocibles", wrapper_id)
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        scraped_at = _first_present(
            item.get("scrapedAt"),
            *(wrapper.get(field) for field in _WRAPPER_TIMESTAMP_FIELDS),
        )
        yield MovementRecord.from_document(
            item,
            record_id=_native_id(item) or f"history-{wrapper_id}-{index}",
            source="history",
            scraped_at=scraped_at,
        )


def iter_current_records(documents: Iterable[Any]) -> Iterator[MovementRecord]:
    for index, document in enumerate(documents):
        if not isinstance(document, dict):
            logger.debug("Movimiento vivo #%s ignorado: no es un documento", index)
            continue
        yield MovementRecord.from_document(
            document,
            record_id=_native_id(document) or f"current-{index}",
            source="current",
        )


def merge_movement_documents(
    current: Iterable[Any], history: Iterable[Any]
) -> list[MovementRecord]:
    """Concatena ambos niveles en una única lista de :class:`MovementRecord`."""

    history_records = chain.from_iterable(
        iter_history_records(wrapper) for wrapper in history if isinstance(wrapper, dict)
    )
    return list(chain(iter_current_records(current), history_records))


async def fetch_movements(
    source: MovementSource, *, period_month: str | None = None
) -> list[MovementRecord]:
    """Consulta ambas colecciones en paralelo y devuelve la vista unificada.

    Si cualquiera de las dos lecturas falla la excepción se propaga sin
    resultados parciales.
    """

    current, history = await asyncio.gather(
        asyncio.to_thread(source.fetch_current_movements),
        asyncio.to_thread(source.fetch_historical_movements, period_month),
    )
    records = merge_movement_documents(current, history)
    logger.info(
        "Movimientos unificados: %s vivos, %s documentos históricos, %s registros",
        len(current),
        len(history),
        len(records),
    )
    return records


__all__ = [
    "MovementSource",
    "PAYLOAD_SHAPES",
    "extract_payload_items",
    "fetch_movements",
    "iter_current_records",
    "iter_history_records",
    "merge_movement_documents",
]
