"""
Handlers pour les commands et events.

Les handlers sont les fonctions qui traitent les commands et events
transitant par le message bus.

- Command handlers : exécutent une action (peuvent échouer)
- Event handlers : réagissent à un fait passé (ne doivent pas échouer)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from fulfillment.domain import commands, events, model, parsing
from fulfillment.views import views

if TYPE_CHECKING:
    from fulfillment.adapters.reporting import AbstractReporter
    from fulfillment.service_layer.context import FulfillmentContext

logger = logging.getLogger(__name__)


# --- Command Handlers ---


def process_order_line(
    cmd: commands.ProcessOrderLine,
    ctx: FulfillmentContext,
) -> Optional[model.Order]:
    """
    Traite une ligne brute du flux de commandes.

    La ligne est analysée une seule fois. Si elle est écartée, aucune
    commande n'est créée et seul un event OrderRejected est émis.
    Retourne la commande consignée, ou None pour une ligne écartée.
    """
    result = parsing.parse_order_line(cmd.line, ctx.inventory)
    if isinstance(result, parsing.Rejection):
        ctx.events.append(
            events.OrderRejected(line=result.line, reason=result.reason.value)
        )
        return None
    return place_order(result, ctx)


def place_order(
    cmd: commands.PlaceOrder,
    ctx: FulfillmentContext,
) -> model.Order:
    """
    Alloue chaque demande d'une commande validée, puis la consigne.

    Chaque ligne est allouée indépendamment, dans l'ordre de lecture :
    une ligne en reliquat n'annule pas ses voisines.
    """
    order = model.Order(stream=cmd.stream, header=cmd.header)
    for product, qty in cmd.requests:
        order.allocate(product, qty, ctx.inventory)
    ctx.order_log.add(order)
    return order


def publish_report(
    cmd: commands.PublishReport,
    ctx: FulfillmentContext,
    reporter: AbstractReporter,
) -> list[str]:
    """Publie une ligne par commande consignée, dans l'ordre du journal."""
    lines = views.report_lines(ctx.order_log)
    reporter.publish(lines)
    return lines


# --- Event Handlers ---


def log_allocation(event: events.Allocated) -> None:
    logger.debug(
        "Prélèvement : %s-%s, %s x%d",
        event.stream, event.header, event.product, event.qty,
    )


def log_order_recorded(event: events.OrderRecorded) -> None:
    logger.info(
        "Commande consignée : %s-%s (%d lignes)",
        event.stream, event.header, event.lines,
    )


def log_backlog(event: events.Backlogged) -> None:
    logger.info(
        "Reliquat : %s-%s, %s x%d",
        event.stream, event.header, event.product, event.qty,
    )


def log_order_rejected(event: events.OrderRejected) -> None:
    logger.debug("Ligne écartée (%s) : %r", event.reason, event.line)


def log_inventory_depleted(
    event: events.InventoryDepleted,
    ctx: FulfillmentContext,
) -> None:
    logger.info(
        "Inventaire épuisé après %d commandes", len(ctx.order_log),
    )
