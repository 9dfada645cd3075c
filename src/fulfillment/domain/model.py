"""
Modèle de domaine pour l'exécution des commandes.

Ce module contient les entités et value objects du domaine métier.
Le domaine modélise un inventaire à produits fixes (Inventory) sur
lequel on prélève les lignes de commande (OrderLine) des commandes
(Order), elles-mêmes consignées dans un journal (OrderLog).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping

from fulfillment.domain import events

# Quantité maximale acceptée pour une paire (produit, quantité) d'une commande.
MAX_LINE_QUANTITY = 5


class Inventory:
    """
    Agrégat représentant l'inventaire.

    Objet volontairement « bête » : il sait seulement que des unités
    entrent et sortent, sans aucune règle métier sur les commandes.
    Le total est maintenu à côté du stock par produit pour détecter
    l'épuisement sans parcourir la table.
    """

    def __init__(self) -> None:
        self._stock: dict[str, int] = {}
        self.total = 0
        self.events: list[events.Event] = []

    def __repr__(self) -> str:
        contents = " ".join(f"{p}={c}" for p, c in sorted(self._stock.items()))
        return f"<Inventory total={self.total} {contents}>"

    @property
    def stock(self) -> Mapping[str, int]:
        """Vue en lecture seule du stock par produit."""
        return MappingProxyType(self._stock)

    def stock_product(self, product: str, count: int) -> None:
        """Ajoute `count` unités de `product`, en créant l'entrée au besoin."""
        if count < 0:
            raise ValueError(f"Quantité de stock négative pour {product} : {count}")
        self._stock[product] = self._stock.get(product, 0) + count
        self.total += count

    def pull(self, product: str, count: int) -> bool:
        """
        Prélève `count` unités de `product` si le stock suffit.

        Vérification et retrait sont indissociables : en cas d'échec
        l'inventaire n'est pas modifié. Un produit jamais stocké est
        vu comme un stock nul, et aucune entrée n'est créée pour lui.
        """
        available = self._stock.get(product)
        if available is None or available < count:
            return False
        self._stock[product] = available - count
        self.total -= count
        if count and self.total == 0:
            self.events.append(events.InventoryDepleted())
        return True

    def available(self, product: str) -> int:
        return self._stock.get(product, 0)

    def is_empty(self) -> bool:
        return self.total == 0

    def has_product(self, product: str) -> bool:
        """Le produit a-t-il déjà été stocké ? (appartenance, pas niveau de stock)"""
        return product in self._stock


@dataclass(frozen=True)
class OrderLine:
    """
    Value Object : résultat de l'allocation d'un produit d'une commande.

    L'allocation est tout-ou-rien : soit `pulled == requested`,
    soit `backlog == requested`, jamais un partage entre les deux.
    """

    product: str
    requested: int
    pulled: int
    backlog: int

    @property
    def fulfilled(self) -> bool:
        return self.pulled == self.requested


def allocate(product: str, requested: int, inventory: Inventory) -> OrderLine:
    """Tente de prélever la quantité demandée ; l'échec part en reliquat."""
    if inventory.pull(product, requested):
        return OrderLine(product, requested, pulled=requested, backlog=0)
    return OrderLine(product, requested, pulled=0, backlog=requested)


@dataclass
class Order:
    """
    Entité représentant une commande sur un flux donné.

    L'identité est le couple (stream, header). Un même header peut
    revenir sur un flux : ce contrôle n'incombe pas à cette classe.
    Chaque ligne est atomique, mais la commande ne l'est pas :
    une ligne peut partir en reliquat alors que sa voisine est servie.
    """

    stream: str
    header: str
    lines: list[OrderLine] = field(default_factory=list)

    def __iter__(self) -> Iterator[OrderLine]:
        return iter(self.lines)

    def add(self, line: OrderLine) -> None:
        self.lines.append(line)

    def allocate(self, product: str, requested: int, inventory: Inventory) -> OrderLine:
        """Alloue une demande sur l'inventaire et ajoute le résultat à la commande."""
        line = allocate(product, requested, inventory)
        self.add(line)
        return line


class OrderLog:
    """
    Historique des commandes traitées, résultats compris.

    Ajout seulement, dans l'ordre d'insertion ; rien n'est jamais
    modifié ni retiré. Le journal émet les événements des commandes
    qu'on lui confie.
    """

    def __init__(self) -> None:
        self._orders: list[Order] = []
        self.events: list[events.Event] = []

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(self._orders)

    def add(self, order: Order) -> None:
        """Consigne une commande traitée."""
        self._orders.append(order)
        for line in order:
            event_class = events.Allocated if line.fulfilled else events.Backlogged
            self.events.append(
                event_class(
                    stream=order.stream,
                    header=order.header,
                    product=line.product,
                    qty=line.requested,
                )
            )
        self.events.append(
            events.OrderRecorded(
                stream=order.stream, header=order.header, lines=len(order.lines)
            )
        )
