"""
Boucle de suivi du flux de commandes.

Le flux est lu ligne par ligne. Après chaque ligne, acceptée ou non,
on regarde si l'inventaire est vide : c'est la seule condition de fin
normale. Le rapport est alors publié, même s'il reste des lignes à lire.

Quand le flux est à sec, la boucle se suspend sur l'événement d'arrêt
(`stop.wait`) avec une attente croissante, puis reprend la lecture à la
position courante. Poser l'événement d'arrêt depuis un autre thread ou
un gestionnaire de signal interrompt la boucle sans rapport.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Optional

from fulfillment import config
from fulfillment.adapters import sources
from fulfillment.domain import commands
from fulfillment.service_layer import messagebus

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    DEPLETED = "depleted"
    CANCELLED = "cancelled"
    SOURCE_UNAVAILABLE = "source unavailable"


class OrderStreamFollower:
    """
    Pilote le traitement d'un flux de commandes jusqu'à épuisement du stock.

    L'attente entre deux relectures vides commence à `poll_interval`,
    est multipliée par `backoff` à chaque relecture vide consécutive,
    plafonne à `max_poll_interval`, et revient au départ dès qu'une
    ligne arrive.
    """

    def __init__(
        self,
        bus: messagebus.MessageBus,
        poll_interval: Optional[float] = None,
        max_poll_interval: Optional[float] = None,
        backoff: Optional[float] = None,
    ):
        self.bus = bus
        self.poll_interval = (
            config.get_poll_interval() if poll_interval is None else poll_interval
        )
        self.max_poll_interval = (
            config.get_max_poll_interval()
            if max_poll_interval is None
            else max_poll_interval
        )
        self.backoff = config.get_poll_backoff() if backoff is None else backoff
        if self.poll_interval < 0 or self.max_poll_interval < self.poll_interval:
            raise ValueError(
                f"Intervalles de relecture incohérents : "
                f"{self.poll_interval} / {self.max_poll_interval}"
            )
        if self.backoff < 1:
            raise ValueError(f"Facteur de relecture inférieur à 1 : {self.backoff}")

    def follow(
        self,
        source: sources.AbstractOrderSource,
        stop: Optional[threading.Event] = None,
    ) -> Outcome:
        """
        Consomme la source jusqu'à épuisement de l'inventaire ou arrêt.

        Une source impossible à ouvrir n'est pas une erreur pour
        l'appelant : rien n'est traité et aucun rapport n'est publié.
        """
        if stop is None:
            stop = threading.Event()
        try:
            source.open()
        except sources.SourceUnavailable:
            logger.warning("Flux de commandes indisponible", exc_info=True)
            return Outcome.SOURCE_UNAVAILABLE
        try:
            return self._run(source, stop)
        finally:
            source.close()

    def _run(self, source: sources.AbstractOrderSource, stop: threading.Event) -> Outcome:
        ctx = self.bus.ctx
        interval = self.poll_interval
        while not stop.is_set():
            line = source.readline()
            if line is None:
                logger.debug("Flux à sec, nouvelle lecture dans %.3fs", interval)
                stop.wait(interval)
                interval = min(interval * self.backoff, self.max_poll_interval)
                continue

            interval = self.poll_interval
            self.bus.handle(commands.ProcessOrderLine(line=line))
            if ctx.inventory.is_empty():
                self.bus.handle(commands.PublishReport())
                return Outcome.DEPLETED

        logger.info("Suivi interrompu, %d commandes consignées", len(ctx.order_log))
        return Outcome.CANCELLED
