"""Clasificación de movimientos en INGRESO / EGRESO / AJUSTE."""
from __future__ import annotations

from enum import Enum
from typing import Any

from .fields import clean_text


class MovementType(str, Enum):
    INGRESO = "INGRESO"
    EGRESO = "EGRESO"
    AJUSTE = "AJUSTE"


_KIND_TYPES: dict[str, MovementType] = {
    "adjustment": MovementType.AJUSTE,
    "adjust": MovementType.AJUSTE,
    "egress": MovementType.EGRESO,
}


def classify_movement(kind: Any) -> MovementType:
    """Deriva el tipo de reporte a partir del texto ``movimiento``.

    Sólo se reconocen coincidencias exactas (sin distinguir mayúsculas); cualquier
    otro valor, incluido uno ausente, se considera ingreso.
    """

    return _KIND_TYPES.get(clean_text(kind).lower(), MovementType.INGRESO)


def resolve_location(movement_type: MovementType, origin: Any, destination: Any) -> str:
    """Elige el depósito relevante según la dirección del movimiento."""

    origin_text = clean_text(origin)
    destination_text = clean_text(destination)
    if movement_type is MovementType.EGRESO:
        return origin_text or destination_text
    return destination_text or origin_text


__all__ = ["MovementType", "classify_movement", "resolve_location"]
