"""
Configuration partagée pour les tests.

Les fakes (reporter, source en mémoire, événement d'arrêt qui ne dort
jamais) sont fournis par des fixtures pour que les tests unitaires
tournent sans I/O ni attente réelle.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional

import pytest

from fulfillment.adapters import reporting, sources


class FakeReporter(reporting.AbstractReporter):
    """Capture les rapports publiés pour vérification dans les tests."""

    def __init__(self) -> None:
        self.publiés: list[list[str]] = []

    def publish(self, lines: Iterable[str]) -> None:
        self.publiés.append(list(lines))


class FakeOrderSource(sources.AbstractOrderSource):
    """
    Source en mémoire.

    `append` simule un autre processus qui complète le flux ;
    `readline` retourne None quand tout a été lu.
    """

    def __init__(self, lines: Optional[Iterable[str]] = None) -> None:
        self._lines = list(lines or [])
        self.position = 0
        self.opened = False
        self.closed = False

    def append(self, *lines: str) -> None:
        self._lines.extend(lines)

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def readline(self) -> Optional[str]:
        if self.position >= len(self._lines):
            return None
        line = self._lines[self.position]
        self.position += 1
        return line


class StopAfter(threading.Event):
    """
    Événement d'arrêt qui ne dort jamais.

    Enregistre chaque attente demandée et se pose tout seul après
    `max_waits` attentes. `on_wait` permet d'agir pendant une attente
    (par exemple compléter la source).
    """

    def __init__(self, max_waits: int = 3, on_wait=None) -> None:
        super().__init__()
        self.max_waits = max_waits
        self.on_wait = on_wait
        self.attentes: list[float] = []

    def wait(self, timeout: Optional[float] = None) -> bool:
        self.attentes.append(timeout)
        if self.on_wait is not None:
            self.on_wait(len(self.attentes))
        if len(self.attentes) >= self.max_waits:
            self.set()
        return self.is_set()


@pytest.fixture
def reporter() -> FakeReporter:
    return FakeReporter()


@pytest.fixture
def make_source():
    return FakeOrderSource


@pytest.fixture
def make_stop():
    return StopAfter
