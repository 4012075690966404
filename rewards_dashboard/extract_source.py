"""Read-only access to the MongoDB database filled by the rewards scraper."""
from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Optional

from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DataSourceError(RuntimeError):
    """Base error for failures while reading scraped data."""


class DataSourceConfigurationError(DataSourceError):
    """Raised when the connection settings are incomplete."""


class DataSourceUnavailableError(DataSourceError):
    """Raised when MongoDB rejects or cannot serve a read."""

    def __init__(self, collection: str, detail: str) -> None:
        super().__init__(detail)
        self.collection = collection
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.detail} (colección={self.collection})"


class ExtractDataSource:
    """Scoped handle over the scraper collections.

    The underlying ``MongoClient`` is created on first use and reused for the
    lifetime of the handle. Callers own the lifecycle and must call
    :meth:`close` when done.
    """

    MOVEMENTS = "otheritems"
    MOVEMENT_HISTORY = "otheritemhistories"
    COFFEE_MOVEMENTS = "coffeemovements"
    COFFEE_MOVEMENT_HISTORY = "coffeemovementhistories"
    CATALOG = "agritems"
    # The stock snapshot reports the freshness of the movement scrape.
    LAST_UPDATED_COLLECTION = MOVEMENTS

    DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 5000

    def __init__(
        self,
        uri: str | None = None,
        *,
        database: str | None = None,
        client: Any | None = None,
        server_selection_timeout_ms: int | None = None,
    ) -> None:
        uri = (uri or "").strip()
        if client is None and not uri:
            raise DataSourceConfigurationError(
                "MONGO_URI_REWARDS es obligatorio para leer los datos extraídos."
            )
        self.uri = uri
        self.database_name = (database or "").strip() or None
        self.server_selection_timeout_ms = (
            server_selection_timeout_ms
            if server_selection_timeout_ms and server_selection_timeout_ms > 0
            else self.DEFAULT_SERVER_SELECTION_TIMEOUT_MS
        )
        self._client = client
        self._owns_client = client is None
        self._database: Any | None = None
        self._open_lock = threading.Lock()

    def _open(self) -> Any:
        if self._database is not None:
            return self._database
        # Concurrent fetches run in worker threads and share one client.
        with self._open_lock:
            if self._database is None:
                self._database = self._connect()
        return self._database

    def _connect(self) -> Any:
        if self._client is None:
            logger.info("Abriendo conexión MongoDB a los datos extraídos")
            self._client = MongoClient(
                self.uri,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                tz_aware=True,
            )
        if self.database_name:
            return self._client[self.database_name]
        try:
            return self._client.get_default_database()
        except PyMongoError as exc:
            raise DataSourceConfigurationError(
                "La URI de MongoDB no indica base de datos; define EXTRACT_DB_NAME."
            ) from exc

    def _find(
        self,
        collection: str,
        query: Optional[Mapping[str, Any]] = None,
    ) -> list[Document]:
        database = self._open()
        try:
            documents = list(database[collection].find(dict(query or {})))
        except PyMongoError as exc:
            logger.exception("Falló la lectura de MongoDB en %s", collection)
            raise DataSourceUnavailableError(
                collection, f"No se pudo leer {collection}: {exc}".rstrip()
            ) from exc
        logger.debug("Leídos %s documentos de %s consulta=%s", len(documents), collection, query)
        return documents

    def ping(self) -> bool:
        """Return ``True`` when the server answers a ``ping`` command."""

        try:
            self._open()
            self._client.admin.command("ping")
        except PyMongoError:
            logger.warning("Falló el ping a MongoDB", exc_info=True)
            return False
        return True

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
        self._database = None

    def fetch_current_movements(self) -> list[Document]:
        return self._find(self.MOVEMENTS)

    def fetch_historical_movements(self, period_month: str | None = None) -> list[Document]:
        query = {"periodMonth": period_month} if period_month else None
        return self._find(self.MOVEMENT_HISTORY, query)

    def fetch_current_coffee_movements(self) -> list[Document]:
        return self._find(self.COFFEE_MOVEMENTS)

    def fetch_historical_coffee_movements(self, period_key: str) -> list[Document]:
        return self._find(self.COFFEE_MOVEMENT_HISTORY, {"periodMonth": period_key})

    def fetch_catalog_items(self) -> list[Document]:
        return self._find(self.CATALOG)

    def fetch_latest_catalog_timestamp(self) -> Any | None:
        """Return the newest raw ``scrapedAt`` value, or ``None``."""

        collection = self.LAST_UPDATED_COLLECTION
        database = self._open()
        try:
            cursor = (
                database[collection]
                .find({"scrapedAt": {"$ne": None}}, {"scrapedAt": 1})
                .sort("scrapedAt", DESCENDING)
                .limit(1)
            )
            latest = next(iter(cursor), None)
        except PyMongoError as exc:
            logger.exception("Falló la lectura de MongoDB en %s", collection)
            raise DataSourceUnavailableError(
                collection, f"No se pudo leer {collection}: {exc}".rstrip()
            ) from exc
        if not latest:
            return None
        return latest.get("scrapedAt")


__all__ = [
    "DataSourceConfigurationError",
    "DataSourceError",
    "DataSourceUnavailableError",
    "ExtractDataSource",
]
