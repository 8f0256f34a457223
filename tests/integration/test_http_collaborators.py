"""Integration tests for the obligation API source and the relay builder."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from scallop_liquidator.config import ScallopConfig
from scallop_liquidator.errors import SourceError
from scallop_liquidator.interfaces.transaction_builder import TransactionRequest
from scallop_liquidator.protocols.scallop.api import ScallopApiSource
from scallop_liquidator.protocols.scallop.relay import RelayTransactionBuilder


def _mock_session(method: str, status: int = 200, data=None, error: Exception | None = None):
    response = AsyncMock()
    response.status = status
    response.json = AsyncMock(return_value=data)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)

    session = AsyncMock()
    if error:
        setattr(session, method, MagicMock(side_effect=error))
    else:
        setattr(session, method, MagicMock(return_value=response))
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture()
def source(sample_scallop_config: ScallopConfig) -> ScallopApiSource:
    return ScallopApiSource(sample_scallop_config)


@pytest.fixture()
def builder(sample_scallop_config: ScallopConfig) -> RelayTransactionBuilder:
    return RelayTransactionBuilder(sample_scallop_config)


@pytest.fixture()
def request_() -> TransactionRequest:
    return TransactionRequest(
        action="liquidate",
        obligation_id="0xOBL",
        debt_coin_name="usdc",
        raw_amount=60_000_000,
        wallet_address="0xWALLET",
        collateral_coin_name="sui",
    )


class TestScallopApiSource:
    @pytest.mark.asyncio
    async def test_returns_account(self, source: ScallopApiSource, structured_account: dict) -> None:
        session = _mock_session("get", data=structured_account)

        with patch("scallop_liquidator.protocols.scallop.api.aiohttp.ClientSession", return_value=session):
            with patch("scallop_liquidator.protocols.scallop.api.aiohttp.TCPConnector"):
                result = await source.get_position("0xOBL")

        assert result == structured_account
        assert session.get.call_args.args[0] == "https://api.example.com/obligations/0xOBL"

    @pytest.mark.asyncio
    async def test_unwraps_data_envelope(
        self, source: ScallopApiSource, structured_account: dict
    ) -> None:
        session = _mock_session("get", data={"data": structured_account})

        with patch("scallop_liquidator.protocols.scallop.api.aiohttp.ClientSession", return_value=session):
            with patch("scallop_liquidator.protocols.scallop.api.aiohttp.TCPConnector"):
                assert await source.get_position("0xOBL") == structured_account

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("status", "data"), [(404, None), (200, None), (200, {"data": None})])
    async def test_nothing_to_report_is_none(
        self, source: ScallopApiSource, status: int, data
    ) -> None:
        session = _mock_session("get", status=status, data=data)

        with patch("scallop_liquidator.protocols.scallop.api.aiohttp.ClientSession", return_value=session):
            with patch("scallop_liquidator.protocols.scallop.api.aiohttp.TCPConnector"):
                assert await source.get_position("0xOBL") is None

    @pytest.mark.asyncio
    async def test_http_error_raises(self, source: ScallopApiSource) -> None:
        session = _mock_session("get", status=500)

        with patch("scallop_liquidator.protocols.scallop.api.aiohttp.ClientSession", return_value=session):
            with patch("scallop_liquidator.protocols.scallop.api.aiohttp.TCPConnector"):
                with pytest.raises(SourceError, match="HTTP 500"):
                    await source.get_position("0xOBL")

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, source: ScallopApiSource) -> None:
        session = _mock_session("get", error=aiohttp.ClientConnectionError("down"))

        with patch("scallop_liquidator.protocols.scallop.api.aiohttp.ClientSession", return_value=session):
            with patch("scallop_liquidator.protocols.scallop.api.aiohttp.TCPConnector"):
                with pytest.raises(SourceError, match="request failed"):
                    await source.get_position("0xOBL")


class TestRelayTransactionBuilder:
    @pytest.mark.asyncio
    async def test_returns_digest(
        self, builder: RelayTransactionBuilder, request_: TransactionRequest
    ) -> None:
        session = _mock_session("post", data={"digest": "DIGEST"})

        with patch("scallop_liquidator.protocols.scallop.relay.aiohttp.ClientSession", return_value=session):
            with patch("scallop_liquidator.protocols.scallop.relay.aiohttp.TCPConnector"):
                assert await builder.submit(request_) == "DIGEST"

        payload = session.post.call_args.kwargs["json"]
        assert payload["debt_coin_name"] == "usdc"
        assert payload["collateral_coin_name"] == "sui"
        assert payload["raw_amount"] == 60_000_000

    @pytest.mark.asyncio
    async def test_error_is_raised_verbatim(
        self, builder: RelayTransactionBuilder, request_: TransactionRequest
    ) -> None:
        session = _mock_session("post", status=400, data={"error": "Obligation locked"})

        with patch("scallop_liquidator.protocols.scallop.relay.aiohttp.ClientSession", return_value=session):
            with patch("scallop_liquidator.protocols.scallop.relay.aiohttp.TCPConnector"):
                with pytest.raises(RuntimeError, match="^Obligation locked$"):
                    await builder.submit(request_)

    @pytest.mark.asyncio
    async def test_unconfigured_relay_raises(self, request_: TransactionRequest) -> None:
        builder = RelayTransactionBuilder(ScallopConfig())
        with pytest.raises(RuntimeError, match="No transaction relay"):
            await builder.submit(request_)
