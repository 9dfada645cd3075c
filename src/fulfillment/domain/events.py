"""
Events du domaine.

Les events représentent des faits qui se sont produits dans le système.
Ils sont immuables et nommés au passé (quelque chose s'est passé).
"""

from dataclasses import dataclass


class Event:
    """Classe de base pour tous les events du domaine."""
    pass


@dataclass(frozen=True)
class Allocated(Event):
    """Une ligne de commande a été entièrement prélevée sur l'inventaire."""

    stream: str
    header: str
    product: str
    qty: int


@dataclass(frozen=True)
class Backlogged(Event):
    """Une ligne de commande n'a pas pu être servie : tout part en reliquat."""

    stream: str
    header: str
    product: str
    qty: int


@dataclass(frozen=True)
class OrderRecorded(Event):
    """Une commande complète a été ajoutée au journal."""

    stream: str
    header: str
    lines: int


@dataclass(frozen=True)
class OrderRejected(Event):
    """Une ligne brute du flux a été écartée à la validation."""

    line: str
    reason: str


@dataclass(frozen=True)
class InventoryDepleted(Event):
    """L'inventaire ne contient plus aucune unité."""

    pass
