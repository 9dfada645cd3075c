"""
Bootstrap : assemblage de l'application (Composition Root).

Ce module construit le message bus avec toutes ses dépendances.
C'est ici que l'injection de dépendances est réalisée :
on assemble les composants concrets (ou les fakes pour les tests).
"""

from __future__ import annotations

from typing import Any

from fulfillment.adapters import reporting
from fulfillment.domain import commands, events
from fulfillment.service_layer import context, handlers, messagebus


def bootstrap(
    ctx: context.FulfillmentContext | None = None,
    reporter: reporting.AbstractReporter | None = None,
    **extra_dependencies: Any,
) -> messagebus.MessageBus:
    """
    Construit et retourne un MessageBus configuré.

    Sans contexte fourni, l'inventaire par défaut est utilisé
    (produits A et B, trois unités chacun).
    """
    if ctx is None:
        ctx = context.with_default_stock()

    if reporter is None:
        reporter = reporting.StreamReporter()

    dependencies: dict[str, Any] = {
        "reporter": reporter,
        **extra_dependencies,
    }

    return messagebus.MessageBus(
        ctx=ctx,
        event_handlers=EVENT_HANDLERS,
        command_handlers=COMMAND_HANDLERS,
        dependencies=dependencies,
    )


# --- Routage des messages vers les handlers ---

EVENT_HANDLERS: dict[type[events.Event], list] = {
    events.Allocated: [handlers.log_allocation],
    events.Backlogged: [handlers.log_backlog],
    events.OrderRecorded: [handlers.log_order_recorded],
    events.OrderRejected: [handlers.log_order_rejected],
    events.InventoryDepleted: [handlers.log_inventory_depleted],
}

COMMAND_HANDLERS: dict[type[commands.Command], Any] = {
    commands.ProcessOrderLine: handlers.process_order_line,
    commands.PlaceOrder: handlers.place_order,
    commands.PublishReport: handlers.publish_report,
}
