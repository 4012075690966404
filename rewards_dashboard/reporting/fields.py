"""Normalización de campos escalares sin tipo fijo (cantidades, estados, nombres)."""
from __future__ import annotations

import math
import re
from typing import Any

DEPOSIT_GRUPO_GEN = "DEPOSITO GRUPO GEN"
DEPOSIT_MONTEVERDE = "DEPOSITO MONTEVERDE"
DEPOSIT_BETTICA = "DEPOSITO BETTICA"
DEPOSIT_TOBAGO = "DEPOSITO TOBAGO 1"
UNKNOWN_DEPOSIT = "—"

# Orden de evaluación relevante: la primera coincidencia gana.
ENTITY_DEPOSITS: tuple[tuple[str, str], ...] = (
    ("monteverde", DEPOSIT_MONTEVERDE),
    ("bettica", DEPOSIT_BETTICA),
    ("tobago", DEPOSIT_TOBAGO),
)

CAFE_COMBO_CODES = frozenset({"1062", "1063", "1064"})

_NON_NUMERIC = re.compile(r"[^\d.-]")
_CODE_PREFIX = re.compile(r"^\s*\((\d+)\)\s*")


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _integral(number: float) -> float | int:
    return int(number) if number.is_integer() else number


def parse_number(value: Any) -> float | int | None:
    """Devuelve el número contenido en ``value`` o ``None`` si no hay ninguno.

    Acepta números y textos; de los textos se descarta todo carácter que no sea
    dígito, ``.`` o ``-`` antes de convertir.
    """

    if value is None or isinstance(value, bool):
        return None
    text = value if isinstance(value, (int, float)) else _NON_NUMERIC.sub("", str(value))
    if text == "":
        return None
    try:
        number = float(text)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return _integral(number)


def coerce_number(value: Any, default: float | int = 0) -> float | int:
    """Variante tolerante de :func:`parse_number`: nunca falla y cae a ``default``."""

    number = parse_number(value)
    return default if number is None else number


def parse_active(status: Any) -> bool:
    """Interpreta el estado textual del catálogo como booleano ``activo``."""

    text = clean_text(status).lower()
    if not text:
        return True
    if "inactive" in text:
        return False
    if "active" in text:
        return True
    return True


def clean_prize_name(raw: Any) -> str:
    """Quita el prefijo ``(<código>)`` de la descripción de una recompensa."""

    return _CODE_PREFIX.sub("", clean_text(raw), count=1).strip()


def is_cafe_combo(raw: Any) -> bool:
    match = _CODE_PREFIX.match("" if raw is None else str(raw))
    return bool(match) and match.group(1) in CAFE_COMBO_CODES


def map_entity_to_deposit(entity: Any) -> str:
    """Traduce la entidad informada por el scraper al depósito físico."""

    text = clean_text(entity)
    if not text:
        return UNKNOWN_DEPOSIT
    lowered = text.lower()
    for needle, deposit in ENTITY_DEPOSITS:
        if needle in lowered:
            return deposit
    return str(entity)


__all__ = [
    "CAFE_COMBO_CODES",
    "DEPOSIT_BETTICA",
    "DEPOSIT_GRUPO_GEN",
    "DEPOSIT_MONTEVERDE",
    "DEPOSIT_TOBAGO",
    "UNKNOWN_DEPOSIT",
    "clean_prize_name",
    "clean_text",
    "coerce_number",
    "is_cafe_combo",
    "map_entity_to_deposit",
    "parse_active",
    "parse_number",
]
