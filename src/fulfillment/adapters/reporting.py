"""
Adapter pour la publication du rapport final.

Le rapport est émis une seule fois, quand l'inventaire est épuisé.
Cette abstraction découple la boucle de suivi de la destination
concrète (sortie standard, fichier, etc.).
"""

from __future__ import annotations

import abc
import sys
from typing import IO, Iterable


class AbstractReporter(abc.ABC):
    """Interface abstraite pour la publication du rapport."""

    @abc.abstractmethod
    def publish(self, lines: Iterable[str]) -> None:
        raise NotImplementedError


class StreamReporter(AbstractReporter):
    """Écrit le rapport ligne par ligne sur un flux texte (stdout par défaut)."""

    def __init__(self, stream: IO[str] | None = None):
        self.stream = stream

    def publish(self, lines: Iterable[str]) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        for line in lines:
            stream.write(line + "\n")
        stream.flush()
