"""
Analyse des lignes brutes (inventaire initial et flux de commandes).

Une seule passe de lecture produit un résultat étiqueté : soit une
command PlaceOrder prête à être appliquée, soit un Rejection qui dit
pourquoi la ligne est écartée. La validation et l'application ne
relisent donc jamais la ligne chacune de leur côté.

Format d'une ligne de commande :
    <stream> <header> (<produit> <quantité>)+

La lecture des paires s'arrête sans bruit à la première paire mal
formée (quantité non entière, produit sans quantité) ; les paires
lues avant elle sont conservées. Une quantité signée est bien formée :
négative, elle écarte toute la ligne de commande, et elle arrête la
lecture de la ligne d'inventaire.
"""

from __future__ import annotations

import enum
import itertools
import re
from dataclasses import dataclass
from typing import Iterator, Union

from fulfillment.domain import commands, model

_QUANTITY = re.compile(r"[+-]?[0-9]+")


class RejectionReason(enum.Enum):
    MISSING_HEADER = "missing stream or header"
    QUANTITY_TOO_LARGE = "quantity above limit"
    NEGATIVE_QUANTITY = "negative quantity"
    UNKNOWN_PRODUCT = "unknown product"
    NO_PRODUCTS = "no product requested"


@dataclass(frozen=True)
class Rejection:
    """Ligne écartée : aucune commande ne sera créée."""

    line: str
    reason: RejectionReason


ParseResult = Union[commands.PlaceOrder, Rejection]


def iter_pairs(tokens: list[str]) -> Iterator[tuple[str, int]]:
    """Produit les paires (produit, quantité) jusqu'à la première mal formée."""
    for i in range(0, len(tokens) - 1, 2):
        product, quantity = tokens[i], tokens[i + 1]
        if not _QUANTITY.fullmatch(quantity):
            return
        yield product, int(quantity)


def parse_stocking_line(line: str) -> list[tuple[str, int]]:
    """Lit la ligne d'inventaire initial : `<produit> <quantité>` répétés."""
    pairs = iter_pairs(line.split())
    return list(itertools.takewhile(lambda pair: pair[1] >= 0, pairs))


def parse_order_line(line: str, inventory: model.Inventory) -> ParseResult:
    """
    Valide une ligne du flux de commandes contre l'inventaire.

    La ligne est acceptée si et seulement si :
    - stream et header sont présents ;
    - toutes les quantités sont entre 0 et MAX_LINE_QUANTITY ;
    - tous les produits sont connus de l'inventaire ;
    - au moins une paire demande une quantité non nulle.
    Une seule paire fautive suffit à écarter toute la ligne.
    """
    tokens = line.split()
    if len(tokens) < 2:
        return Rejection(line, RejectionReason.MISSING_HEADER)
    stream, header = tokens[0], tokens[1]

    requests = tuple(iter_pairs(tokens[2:]))
    for product, quantity in requests:
        if quantity < 0:
            return Rejection(line, RejectionReason.NEGATIVE_QUANTITY)
        if quantity > model.MAX_LINE_QUANTITY:
            return Rejection(line, RejectionReason.QUANTITY_TOO_LARGE)
        if not inventory.has_product(product):
            return Rejection(line, RejectionReason.UNKNOWN_PRODUCT)
    if not any(quantity > 0 for _, quantity in requests):
        return Rejection(line, RejectionReason.NO_PRODUCTS)

    return commands.PlaceOrder(stream=stream, header=header, requests=requests)
