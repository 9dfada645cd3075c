"""
Contexte d'exécution.

Le FulfillmentContext rassemble l'état mutable partagé d'une exécution :
l'inventaire et le journal des commandes. Il est passé explicitement
aux handlers (injecté par le message bus sous le nom `ctx`), ce qui
évite tout état global et permet de tester les handlers en isolation.

Il joue aussi le rôle de collecteur d'événements : comme un Unit of Work,
il vide les listes d'événements des agrégats pour les transmettre au bus.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from fulfillment.adapters import sources
from fulfillment.domain import events, model, parsing

logger = logging.getLogger(__name__)

DEFAULT_STOCK: tuple[tuple[str, int], ...] = (("A", 3), ("B", 3))


class FulfillmentContext:
    """Inventaire + journal d'une exécution, et les événements en attente."""

    def __init__(
        self,
        inventory: model.Inventory | None = None,
        order_log: model.OrderLog | None = None,
    ) -> None:
        self.inventory = inventory if inventory is not None else model.Inventory()
        self.order_log = order_log if order_log is not None else model.OrderLog()
        self.events: list[events.Event] = []

    def collect_new_events(self) -> Iterator[events.Event]:
        """
        Collecte les événements émis depuis le dernier appel.

        Ordre : événements du contexte (rejets), de l'inventaire,
        puis du journal.
        """
        for source in (self.events, self.inventory.events, self.order_log.events):
            while source:
                yield source.pop(0)


def with_stock(pairs: Iterable[tuple[str, int]]) -> FulfillmentContext:
    ctx = FulfillmentContext()
    for product, count in pairs:
        ctx.inventory.stock_product(product, count)
    ctx.inventory.events.clear()
    return ctx


def with_default_stock() -> FulfillmentContext:
    """Contexte de démonstration : deux produits, trois unités chacun."""
    return with_stock(DEFAULT_STOCK)


def from_inventory_file(path: str | Path) -> FulfillmentContext:
    """
    Construit le contexte à partir de la première ligne d'un fichier.

    Fichier absent ou ligne vide : inventaire vide, sans erreur.
    Ligne mal formée : on garde les paires lues avant la faute.
    """
    try:
        line = sources.read_first_line(path)
    except sources.SourceUnavailable:
        logger.warning("Fichier d'inventaire illisible : %s", path)
        line = ""
    ctx = with_stock(parsing.parse_stocking_line(line))
    logger.info("Inventaire initial : %r", ctx.inventory)
    return ctx
