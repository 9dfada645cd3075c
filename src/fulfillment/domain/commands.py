"""
Commands du domaine.

Les commands représentent des intentions : quelque chose que
le système doit faire. Contrairement aux events (faits passés),
les commands sont des demandes qui peuvent échouer.
"""

from __future__ import annotations

from dataclasses import dataclass


class Command:
    """Classe de base pour toutes les commands."""
    pass


@dataclass(frozen=True)
class ProcessOrderLine(Command):
    """Demande de traitement d'une ligne brute lue sur le flux de commandes."""

    line: str


@dataclass(frozen=True)
class PlaceOrder(Command):
    """
    Demande de passage d'une commande déjà validée.

    `requests` conserve l'ordre de lecture des paires (produit, quantité).
    """

    stream: str
    header: str
    requests: tuple[tuple[str, int], ...]


@dataclass(frozen=True)
class PublishReport(Command):
    """Demande de publication du rapport final à partir du journal."""

    pass
