"""
Unit tests for InsightsService.

The Anthropic client is replaced with a MagicMock; no API calls are made.
"""

import pytest
import anthropic
import httpx
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch, MagicMock

from services.insights_service import (
    InsightsService,
    NOT_CONFIGURED_MESSAGE,
    build_prompt,
)
from models.dashboard import DashboardMetrics
from models.order import OrderResponse
from exceptions import InsightsError

from tests.factories import OrderFactory


def metrics() -> DashboardMetrics:
    return DashboardMetrics(
        total_sales=Decimal("1500"),
        order_count=4,
        active_clients=3,
        average_ticket=Decimal("375"),
        total_clients=10,
        active_client_ratio=30,
    )


def orders() -> list[OrderResponse]:
    return [
        OrderResponse(**OrderFactory.create(id=f"o{i}", client_name=f"Cliente {i}"))
        for i in range(5)
    ]


@pytest.fixture
def dashboard():
    service = MagicMock()
    service.get_orders.return_value = orders()
    service.get_metrics.return_value = metrics()
    with patch("services.insights_service.get_dashboard_service", return_value=service):
        yield service


def claude_reply(text: str):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class TestBuildPrompt:

    def test_includes_metrics_and_three_orders(self):
        prompt = build_prompt(metrics(), orders())

        assert "Total Vendido: R$ 1500.00" in prompt
        assert "Ticket Médio: R$ 375.00" in prompt
        assert "Cliente 0" in prompt
        assert "Cliente 2" in prompt
        assert "Cliente 3" not in prompt


class TestInsightsService:

    def test_not_configured_makes_no_call(self, dashboard):
        with patch("services.insights_service.settings") as settings:
            settings.insights_configured = False
            service = InsightsService()

        result = service.generate()

        assert result.available is False
        assert result.text == NOT_CONFIGURED_MESSAGE
        assert result.metrics.order_count == 4

    def test_generates_text(self, dashboard):
        # Arrange
        client = MagicMock()
        client.messages.create.return_value = claude_reply("Bom desempenho no mês.")
        service = InsightsService(client=client)

        # Act
        result = service.generate()

        # Assert
        assert result.available is True
        assert result.text == "Bom desempenho no mês."
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == InsightsService.SYSTEM_PROMPT
        assert "Cliente 2" in kwargs["messages"][0]["content"]

    def test_empty_reply_falls_back(self, dashboard):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(content=[])
        service = InsightsService(client=client)

        result = service.generate()

        assert result.available is True
        assert result.text

    def test_api_error_raises(self, dashboard):
        # Arrange
        client = MagicMock()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client.messages.create.side_effect = anthropic.APIConnectionError(request=request)
        service = InsightsService(client=client)

        # Act / Assert
        with pytest.raises(InsightsError) as exc_info:
            service.generate()

        assert exc_info.value.status_code == 503
        assert exc_info.value.details["service"] == "insights"
