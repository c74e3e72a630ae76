"""
Sales insights generated by Claude.

Sends the dashboard metrics and the latest orders to the Messages API
and returns a short executive summary in Portuguese.
"""

from typing import Optional, Sequence
import anthropic
import structlog

from config import settings
from models.dashboard import DashboardMetrics, InsightsResponse
from models.order import OrderResponse
from exceptions import InsightsError
from services.dashboard_service import get_dashboard_service

logger = structlog.get_logger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "Chave da API Anthropic não encontrada. "
    "Configure ANTHROPIC_API_KEY para gerar insights."
)
EMPTY_RESPONSE_MESSAGE = "Não foi possível gerar insights no momento."

RECENT_ORDERS = 3


def build_prompt(metrics: DashboardMetrics, recent_orders: Sequence[OrderResponse]) -> str:
    """User message with the metrics and the latest orders."""
    lines = [
        "Analise os seguintes dados da empresa (mês atual).",
        "",
        "Métricas:",
        f"- Total Vendido: R$ {metrics.total_sales:.2f}",
        f"- Pedidos: {metrics.order_count}",
        f"- Clientes Ativos: {metrics.active_clients}",
        f"- Ticket Médio: R$ {metrics.average_ticket:.2f}",
        "",
        f"Últimos {RECENT_ORDERS} pedidos para contexto:",
    ]
    for order in recent_orders[:RECENT_ORDERS]:
        lines.append(
            f"- Cliente: {order.client_name}, Valor: R$ {order.total:.2f}, "
            f"Status: {order.status.value}"
        )
    return "\n".join(lines)


class InsightsService:
    """
    Generate dashboard insights with Claude.

    Without an API key the service reports itself unavailable and
    never calls the API.
    """

    SYSTEM_PROMPT = """Atue como um gerente comercial sênior especialista em análise de dados.
Forneça um resumo executivo curto (máximo 3 parágrafos) com insights sobre desempenho e sugestões de ação.

Foque em:
1. Avaliação do desempenho.
2. Oportunidades de melhoria baseada no ticket médio.
3. Uma ação motivacional para a equipe.

Responda em português, em texto corrido, sem markdown."""

    def __init__(self, client: Optional[anthropic.Anthropic] = None):
        if client is not None:
            self.client = client
        elif settings.insights_configured:
            self.client = anthropic.Anthropic(api_key=settings.anthropic_api_key)
        else:
            self.client = None

    @property
    def available(self) -> bool:
        return self.client is not None

    def generate(self) -> InsightsResponse:
        """
        Summarize the current sales figures.

        Raises:
            InsightsError: If the Claude API call fails
        """
        dashboard = get_dashboard_service()
        orders = dashboard.get_orders()
        metrics = dashboard.get_metrics(orders)

        if not self.available:
            logger.warning("insights_not_configured")
            return InsightsResponse(available=False, text=NOT_CONFIGURED_MESSAGE, metrics=metrics)

        prompt = build_prompt(metrics, orders[:RECENT_ORDERS])
        logger.info("insights_requested", model=settings.insights_model, orders=len(orders))

        try:
            response = self.client.messages.create(
                model=settings.insights_model,
                max_tokens=settings.insights_max_tokens,
                system=self.SYSTEM_PROMPT,
                messages=[{
                    "role": "user",
                    "content": prompt
                }]
            )
        except anthropic.APIError as e:
            logger.error("claude_api_error", error=str(e))
            raise InsightsError(f"Claude API error: {str(e)}")
        except Exception as e:
            logger.error("insights_generation_failed", error=str(e))
            raise InsightsError(f"Insights generation failed: {str(e)}")

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        ).strip()

        logger.info("insights_generated", length=len(text))
        return InsightsResponse(
            available=True,
            text=text or EMPTY_RESPONSE_MESSAGE,
            metrics=metrics,
        )


# Singleton instance for convenience
_insights_service: Optional[InsightsService] = None

def get_insights_service() -> InsightsService:
    """Get or create InsightsService instance."""
    global _insights_service
    if _insights_service is None:
        _insights_service = InsightsService()
    return _insights_service
