"""Client for the trading service: backtest and live-session results."""

from __future__ import annotations

from midas_client.client import ServiceClient
from midas_client.models.envelope import ApiResponse
from midas_client.models.trading import BacktestData, LiveData


class Trading(ServiceClient):
    """Create, list, fetch and delete backtest and live-session documents.

    List endpoints return ``(id, name)`` pairs.
    """

    prefix = "/trading/"
    settings_url_field = "trading_url"

    # Live
    async def create_live(self, data: LiveData) -> ApiResponse[int]:
        return await self._call(
            "POST",
            "live/create",
            ApiResponse[int],
            json=data.model_dump(mode="json", exclude_none=True),
        )

    async def list_live(self) -> ApiResponse[list[tuple[int, str]]]:
        return await self._call("GET", "live/list", ApiResponse[list[tuple[int, str]]])

    async def get_live(self, live_id: int) -> ApiResponse[list[LiveData]]:
        return await self._call(
            "GET", "live/get", ApiResponse[list[LiveData]], params={"id": live_id}
        )

    async def delete_live(self, live_id: int) -> ApiResponse[str]:
        return await self._call("DELETE", "live/delete", ApiResponse[str], json=live_id)

    # Backtest
    async def create_backtest(self, data: BacktestData) -> ApiResponse[int]:
        return await self._call(
            "POST",
            "backtest/create",
            ApiResponse[int],
            json=data.model_dump(mode="json", exclude_none=True),
        )

    async def list_backtest(self) -> ApiResponse[list[tuple[int, str]]]:
        return await self._call("GET", "backtest/list", ApiResponse[list[tuple[int, str]]])

    async def get_backtest(self, backtest_id: int) -> ApiResponse[list[BacktestData]]:
        return await self._call(
            "GET", "backtest/get", ApiResponse[list[BacktestData]], params={"id": backtest_id}
        )

    async def delete_backtest(self, backtest_id: int) -> ApiResponse[str]:
        return await self._call("DELETE", "backtest/delete", ApiResponse[str], json=backtest_id)
