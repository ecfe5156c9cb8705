"""Collection export (file download) and import (file upload)."""

from __future__ import annotations

from heroesmarket.infrastructure.http import InvalidRequestError
from heroesmarket.services.dto import ImportResult

from .base import ResourceClient

EXPORT_FORMATS = ("json", "csv")


def _mime_type(filename: str) -> str:
    return "application/json" if filename.lower().endswith(".json") else "text/csv"


class CollectionTransferClient(ResourceClient):
    async def export_collection(self, collection_id: int, export_format: str = "json") -> bytes:
        if export_format not in EXPORT_FORMATS:
            raise InvalidRequestError(f"Unsupported export format: {export_format}")
        return await self._gateway.execute_raw(
            f"/collections/{collection_id}/export/",
            query={"export_format": export_format},
        )

    async def import_collection(
        self, data: bytes, filename: str, collection_name: str | None = None
    ) -> ImportResult:
        return await self._gateway.upload(
            "/collections/import/",
            content=data,
            filename=filename,
            field_name="file",
            content_type=_mime_type(filename),
            fields={"name": collection_name} if collection_name else None,
            response_model=ImportResult,
        )
