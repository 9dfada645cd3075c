"""
Views (lecture) : mise en forme du journal des commandes.

Fonctions de lecture pure, sans effet sur le modèle. Elles produisent
le rapport final, une ligne par commande, dans l'ordre du journal :

    <stream>-<header>: <produit>=<demandé>/<prélevé>%<reliquat>, ...
"""

from __future__ import annotations

from fulfillment.domain import model


def format_line(line: model.OrderLine) -> str:
    return f"{line.product}={line.requested}/{line.pulled}%{line.backlog}"


def format_order(order: model.Order) -> str:
    return f"{order.stream}-{order.header}: " + ", ".join(
        format_line(line) for line in order
    )


def report_lines(order_log: model.OrderLog) -> list[str]:
    """Retourne le rapport complet, une chaîne par commande consignée."""
    return [format_order(order) for order in order_log]
