"""Normalización de fechas heterogéneas provenientes del scraper.

Los documentos llegan con fechas en varios formatos (``datetime`` nativo, ISO-8601,
``dd/MM/yyyy`` y ``dd/MM/yyyy HH:mm:ss``). Todas se convierten a un instante UTC
con zona horaria; los valores sin zona se interpretan como UTC, igual que los
parámetros de consulta, para que registros y filtros compartan el mismo reloj.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

ARGENTINA_TZ = ZoneInfo("America/Argentina/Buenos_Aires")
DISPLAY_FORMAT = "%d/%m/%Y %H:%M:%S"

QUERY_GRAMMAR_ISO = "iso"
QUERY_GRAMMAR_DMY = "dmy"
QUERY_GRAMMARS = (QUERY_GRAMMAR_ISO, QUERY_GRAMMAR_DMY)

_DAY_FIRST_PATTERN = re.compile(
    r"^(\d{2})/(\d{2})/(\d{4})(?:\s+(\d{2}):(\d{2}):(\d{2}))?$"
)
_ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DMY_DATE_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_PERIOD_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_iso(text: str) -> datetime | None:
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(candidate))
    except ValueError:
        return None


def _parse_day_first(text: str) -> datetime | None:
    match = _DAY_FIRST_PATTERN.match(text)
    if not match:
        return None
    day, month, year = (int(part) for part in match.group(1, 2, 3))
    if day <= 0 or month <= 0 or year <= 0:
        return None
    hour, minute, second = (int(part or 0) for part in match.group(4, 5, 6))
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_date(value: Any) -> datetime | None:
    """Convierte ``value`` en un instante UTC o devuelve ``None`` si no es posible.

    Orden de intentos: instancia ``datetime``/``date``, ISO-8601 y finalmente
    ``dd/MM/yyyy`` con hora opcional ``HH:mm:ss``. Nunca lanza excepciones.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = str(value).strip()
    if not text:
        return None
    return _parse_iso(text) or _parse_day_first(text)


def format_display_date(instant: datetime, tz: ZoneInfo = ARGENTINA_TZ) -> str | None:
    """Representa ``instant`` como ``dd/MM/yyyy HH:mm:ss`` en hora de Argentina.

    Sólo para presentación: el texto resultante no debe volver a parsearse.
    Devuelve ``None`` si el instante no puede llevarse a la zona de destino
    (p. ej. ``0001-01-01T00:00:00Z``).
    """

    try:
        return _as_utc(instant).astimezone(tz).strftime(DISPLAY_FORMAT)
    except (OverflowError, ValueError):
        return None


def render_date(value: Any, tz: ZoneInfo = ARGENTINA_TZ) -> str | None:
    parsed = parse_date(value)
    if parsed is None:
        return None
    return format_display_date(parsed, tz)


def parse_query_date(text: str | None, grammar: str = QUERY_GRAMMAR_ISO) -> datetime | None:
    """Interpreta un parámetro de consulta como medianoche UTC.

    ``grammar`` selecciona ``YYYY-MM-DD`` (``iso``) o ``dd/MM/yyyy`` (``dmy``).
    Devuelve ``None`` cuando el parámetro está vacío y lanza ``ValueError``
    cuando tiene un formato distinto al configurado.
    """

    if text is None:
        return None
    cleaned = text.strip()
    if not cleaned:
        return None
    if grammar == QUERY_GRAMMAR_ISO:
        match = _ISO_DATE_PATTERN.match(cleaned)
        parts = (match.group(1), match.group(2), match.group(3)) if match else None
    elif grammar == QUERY_GRAMMAR_DMY:
        match = _DMY_DATE_PATTERN.match(cleaned)
        parts = (match.group(3), match.group(2), match.group(1)) if match else None
    else:
        raise ValueError(f"Gramática de fecha desconocida: {grammar}")
    if parts is None:
        raise ValueError(f"Formato de fecha inválido: {cleaned}")
    year, month, day = (int(part) for part in parts)
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError as exc:
        raise ValueError(f"Fecha inexistente: {cleaned}") from exc


def end_of_day(instant: datetime) -> datetime:
    return instant.replace(hour=23, minute=59, second=59, microsecond=999_000)


@dataclass(frozen=True)
class DateRange:
    """Rango de fechas inclusivo aplicado sobre la fecha del movimiento."""

    start: datetime | None = None
    end: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, instant: datetime) -> bool:
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant > self.end:
            return False
        return True

    @classmethod
    def from_query(
        cls,
        start_text: str | None = None,
        end_text: str | None = None,
        grammar: str = QUERY_GRAMMAR_ISO,
    ) -> "DateRange":
        start = parse_query_date(start_text, grammar)
        end = parse_query_date(end_text, grammar)
        return cls(start=start, end=end_of_day(end) if end else None)

    def describe(self) -> str:
        if not self.is_active:
            return "Sin filtro de fechas"
        start = self.start.strftime("%d/%m/%Y") if self.start else "inicio"
        end = self.end.strftime("%d/%m/%Y") if self.end else "hoy"
        return f"Desde {start} hasta {end}"


def current_period_key(now: datetime | None = None, tz: ZoneInfo = ARGENTINA_TZ) -> str:
    """Clave ``YYYY-MM`` del mes en curso según la hora de Argentina."""

    reference = _as_utc(now) if now else datetime.now(timezone.utc)
    return reference.astimezone(tz).strftime("%Y-%m")


def is_period_key(text: str | None) -> bool:
    return bool(text) and bool(_PERIOD_KEY_PATTERN.match(text.strip()))


__all__ = [
    "ARGENTINA_TZ",
    "DISPLAY_FORMAT",
    "DateRange",
    "QUERY_GRAMMARS",
    "QUERY_GRAMMAR_DMY",
    "QUERY_GRAMMAR_ISO",
    "current_period_key",
    "end_of_day",
    "format_display_date",
    "is_period_key",
    "parse_date",
    "parse_query_date",
    "render_date",
]
