"""Modelos tolerantes para los documentos crudos del scraper.

Ningún campo de origen es obligatorio: los validadores convierten valores
ausentes o de tipo inesperado en textos vacíos o listas vacías, y los campos
cuyo formato se resuelve más tarde (fechas, cantidades) se conservan crudos.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .fields import clean_text

RecordSource = Literal["current", "history"]


def _text(value: Any) -> str:
    return clean_text(value)


class MovementRecord(BaseModel):
    """Movimiento de premios/puntos ya unificado entre colección viva e histórica."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(..., description="Identificador único dentro de la vista unificada")
    source: RecordSource = Field("current", description="Nivel de origen del registro")
    occurred_at: Any = Field(None, alias="fecha", description="Fecha del movimiento, sin normalizar")
    movement_kind: str = Field("", alias="movimiento")
    origin_location: str = Field("", alias="depositoOrigen")
    destination_location: str = Field("", alias="depositoDestino")
    reward_description: str = Field("", alias="recompensa")
    quantity: Any = Field(None, alias="cantidad", description="Cantidad numérica o textual")
    entity: str = Field("", alias="entidad")
    scraped_at: Any = Field(None, alias="scrapedAt", description="Momento de la extracción")

    @field_validator(
        "movement_kind",
        "origin_location",
        "destination_location",
        "reward_description",
        "entity",
        mode="before",
    )
    @classmethod
    def _strip(cls, value: Any) -> str:
        return _text(value)

    @classmethod
    def from_document(
        cls,
        document: dict[str, Any],
        *,
        record_id: str,
        source: RecordSource,
        scraped_at: Any = None,
    ) -> "MovementRecord":
        payload = dict(document)
        payload["id"] = record_id
        payload["source"] = source
        if scraped_at is not None:
            payload["scrapedAt"] = scraped_at
        return cls.model_validate(payload)


class CoffeeEgress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entity: Any = Field(None, alias="entidad")
    quantity: Any = Field(None, alias="cantidad")


class CoffeeMovement(BaseModel):
    """Documento de egresos de café, vivo o histórico (``periodMonth``)."""

    model_config = ConfigDict(extra="ignore")

    coffee_type: str = Field("", alias="tipoCafe")
    egresses: list[CoffeeEgress] = Field(default_factory=list, alias="egresos")
    scraped_at: Any = Field(None, alias="scrapedAt")
    period_month: str | None = Field(None, alias="periodMonth")

    @field_validator("coffee_type", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return _text(value)

    @field_validator("egresses", mode="before")
    @classmethod
    def _only_mappings(cls, value: Any) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            return []
        return [entry for entry in value if isinstance(entry, dict)]

    @field_validator("period_month", mode="before")
    @classmethod
    def _strip_optional(cls, value: Any) -> str | None:
        return _text(value) or None


class PrizeItem(BaseModel):
    """Entrada del catálogo de premios con stock por depósito."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field("", alias="_id")
    description: str | None = None
    category: str = ""
    stock_grupogen: Any = None
    stock_monteverde: Any = None
    stock_bettica: Any = None
    stock_tobago1: Any = None
    cost: Any = None
    points: Any = None
    status: Any = None
    scraped_at: Any = Field(None, alias="scrapedAt")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return _text(value)

    @field_validator("description", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value)

    @field_validator("category", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return _text(value)

    @property
    def display_name(self) -> str:
        return self.description if self.description is not None else "—"


__all__ = ["CoffeeEgress", "CoffeeMovement", "MovementRecord", "PrizeItem"]
