"""
Infrastructure layer: REST client for the hosted database with retry logic.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from farm_market.config import settings
from farm_market.infrastructure.api_constants import APIConstants, DatabaseTables

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when the hosted database rejects or fails a request."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_conflict(self) -> bool:
        return self.status_code == APIConstants.CONFLICT_STATUS


@dataclass(frozen=True)
class Op:
    """A non-equality filter, e.g. Op("neq", 5) or Op("gte", 20)."""
    operator: str
    value: Any


FilterValue = Union[str, int, float, bool, None, Op, Sequence[Any]]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_filters(filters: Optional[Dict[str, FilterValue]]) -> Dict[str, str]:
    """
    Encode column filters into REST query parameters.

    Scalars become ``eq``, lists and tuples become ``in``, ``None`` becomes
    ``is.null`` and ``Op`` instances are passed through with their operator.

    Args:
        filters: Mapping of column name to filter value

    Returns:
        Query parameters understood by the database REST interface
    """
    params: Dict[str, str] = {}
    for column, value in (filters or {}).items():
        if isinstance(value, Op):
            params[column] = f"{value.operator}.{_format_value(value.value)}"
        elif value is None:
            params[column] = "is.null"
        elif isinstance(value, (list, tuple)):
            joined = ",".join(_format_value(v) for v in value)
            params[column] = f"in.({joined})"
        else:
            params[column] = f"eq.{_format_value(value)}"
    return params


class DatabaseClient:
    """
    Generic CRUD client for the hosted database.

    Every call is a single REST request. Server errors and transport
    failures are retried with exponential backoff; client errors are not.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        """Initialize the client with configuration."""
        self.base_url = base_url or settings.database_url
        self.api_key = api_key if api_key is not None else settings.database_api_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "accept": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=settings.database_timeout,
        )

    async def __aenter__(self) -> "DatabaseClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        response = await self.client.request(method, endpoint, **kwargs)
        # Only server errors are worth another attempt
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: REST path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            DatabaseError: If the request fails after retries
        """
        try:
            response = await self._send(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            raise DatabaseError(
                f"Database request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            raise DatabaseError(f"Database request error: {str(e)}", status_code=503)

        if response.is_error:
            raise DatabaseError(
                f"Database request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        return response.json()

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, FilterValue]] = None,
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch rows from a table.

        Args:
            table: Table name
            filters: Column filters (see ``encode_filters``)
            columns: Column selection, may embed related tables
            order: Ordering such as ``"created_at.desc"``
            limit: Maximum number of rows

        Returns:
            List of rows
        """
        params = encode_filters(filters)
        params["select"] = columns
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        data = await self._make_request("GET", DatabaseTables.path(table), params=params)
        return data or []

    async def select_one(
        self,
        table: str,
        filters: Dict[str, FilterValue],
        columns: str = "*",
    ) -> Optional[Dict[str, Any]]:
        """Fetch the first row matching the filters, or None."""
        rows = await self.select(table, filters=filters, columns=columns, limit=1)
        return rows[0] if rows else None

    async def insert(
        self,
        table: str,
        rows: Union[Dict[str, Any], List[Dict[str, Any]]],
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """Insert one or more rows and return them as stored."""
        payload = rows if isinstance(rows, list) else [rows]
        data = await self._make_request(
            "POST",
            DatabaseTables.path(table),
            params={"select": columns},
            json=payload,
            headers={"Prefer": APIConstants.PREFER_RETURN_REPRESENTATION},
        )
        return data or []

    async def upsert(
        self,
        table: str,
        row: Dict[str, Any],
        on_conflict: Sequence[str],
    ) -> List[Dict[str, Any]]:
        """Insert a row, merging into an existing row on the conflict columns."""
        data = await self._make_request(
            "POST",
            DatabaseTables.path(table),
            params={"on_conflict": ",".join(on_conflict)},
            json=[row],
            headers={"Prefer": APIConstants.PREFER_MERGE_DUPLICATES},
        )
        return data or []

    async def update(
        self,
        table: str,
        patch: Dict[str, Any],
        filters: Dict[str, FilterValue],
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """Update matching rows and return them as stored."""
        params = encode_filters(filters)
        params["select"] = columns
        data = await self._make_request(
            "PATCH",
            DatabaseTables.path(table),
            params=params,
            json=patch,
            headers={"Prefer": APIConstants.PREFER_RETURN_REPRESENTATION},
        )
        return data or []

    async def delete(
        self,
        table: str,
        filters: Dict[str, FilterValue],
    ) -> List[Dict[str, Any]]:
        """Delete matching rows and return the deleted rows."""
        if not filters:
            raise ValueError(f"Refusing to delete from {table} without filters")
        data = await self._make_request(
            "DELETE",
            DatabaseTables.path(table),
            params=encode_filters(filters),
            headers={"Prefer": APIConstants.PREFER_RETURN_REPRESENTATION},
        )
        return data or []


# Singleton instance
_database_client: Optional[DatabaseClient] = None


def get_database_client() -> DatabaseClient:
    """
    Get or create the singleton database client instance.

    Returns:
        DatabaseClient instance
    """
    global _database_client
    if _database_client is None:
        _database_client = DatabaseClient()
    return _database_client
