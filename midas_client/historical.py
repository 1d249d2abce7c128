"""Client for the historical-data service: instruments and market-data records."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from midas_client.client import ServiceClient
from midas_client.models.envelope import ApiResponse
from midas_client.models.instruments import Instrument
from midas_client.models.params import RetrieveParams

logger = logging.getLogger(__name__)


class Historical(ServiceClient):
    """Instrument CRUD plus bulk record upload and download.

    Single-shot calls return the backend's envelope; business failures
    (duplicate ticker, unknown id) come back with ``status == "failed"`` or a
    non-200 ``code`` rather than as exceptions.
    """

    prefix = "/historical/"
    settings_url_field = "historical_url"

    # Instruments
    async def create_symbol(self, instrument: Instrument) -> ApiResponse[int]:
        """Register an instrument; the new id is also embedded in ``message``."""
        return await self._call(
            "POST",
            "instruments/create",
            ApiResponse[int],
            json=instrument.model_dump(mode="json"),
        )

    async def get_symbol(self, ticker: str) -> ApiResponse[int]:
        """Look up an instrument id by ticker (``code`` 404 and ``data`` 0 when unknown)."""
        return await self._call("GET", "instruments/get", ApiResponse[int], json=ticker)

    async def list_symbols(self) -> ApiResponse[list[Instrument]]:
        return await self._call("GET", "instruments/list", ApiResponse[list[Instrument]])

    async def update_symbol(self, instrument: Instrument, instrument_id: int) -> ApiResponse[None]:
        return await self._call(
            "PUT",
            "instruments/update",
            ApiResponse[None],
            json=[instrument.model_dump(mode="json"), instrument_id],
        )

    async def delete_symbol(self, instrument_id: int) -> ApiResponse[None]:
        return await self._call("DELETE", "instruments/delete", ApiResponse[None], json=instrument_id)

    # Market data
    async def create_mbp(self, data: bytes) -> ApiResponse[str]:
        """Upload an encoded record batch.

        The backend streams progress envelopes; the result is the last
        successful one, or the first failure (e.g. duplicate records).
        """
        return await self._call_streamed("POST", "mbp/create", json=list(data))

    async def create_mbp_from_file(self, file_path: str) -> ApiResponse[str]:
        """Ask the backend to load a record file it can read from ``file_path``."""
        return await self._call_streamed("POST", "mbp/bulk_upload", json=file_path)

    async def get_records(self, params: RetrieveParams) -> ApiResponse[bytes]:
        """Download encoded records; ``data`` holds the complete binary payload."""
        return await self._download("GET", "mbp/get", json=params.to_payload())

    async def get_records_to_file(
        self, params: RetrieveParams, file_path: str | Path
    ) -> ApiResponse[bytes]:
        """Download records and write the payload verbatim to ``file_path``.

        Nothing is written unless the download succeeded.
        """
        response = await self.get_records(params)
        if not response.is_success:
            logger.warning(
                "Not writing %s: download returned %s (%s)",
                file_path,
                response.status,
                response.message,
            )
            return response

        await asyncio.to_thread(Path(file_path).write_bytes, response.data)
        logger.info("Wrote %d bytes to %s", len(response.data), file_path)
        return response
