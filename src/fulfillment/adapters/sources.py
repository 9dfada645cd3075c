"""
Adapter pour les sources de lignes (fichiers d'inventaire et de commandes).

Le flux de commandes est un fichier que d'autres processus complètent
au fil de l'eau. La source le lit en mode « suivi » (comme `tail -f`) :
arrivée en fin de fichier, elle ne se ferme pas, elle signale
simplement qu'il n'y a rien de disponible pour l'instant et reprendra
à la même position au prochain appel.
"""

from __future__ import annotations

import abc
from pathlib import Path
from typing import IO, Optional


class SourceUnavailable(Exception):
    """Levée quand une source ne peut pas être ouverte ou lue."""
    pass


class AbstractOrderSource(abc.ABC):
    """
    Interface abstraite d'une source de lignes de commande.

    `readline()` retourne la prochaine ligne complète (sans le saut de
    ligne final), ou None si aucune ligne n'est disponible pour
    l'instant. None ne signifie pas que la source est terminée.
    """

    def __enter__(self) -> AbstractOrderSource:
        self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    @abc.abstractmethod
    def readline(self) -> Optional[str]:
        raise NotImplementedError


class FileOrderSource(AbstractOrderSource):
    """
    Source suivant un fichier texte en cours d'écriture.

    Une ligne sans saut de ligne final est considérée comme en cours
    d'écriture : elle est mise de côté jusqu'à la lecture suivante. Si le
    fichier n'a pas grandi entre-temps, le fragment est rendu tel quel.
    Les octets qui ne sont pas de l'UTF-8 valide sont remplacés par U+FFFD.
    """

    def __init__(self, path: str | Path, encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding
        self._file: IO[str] | None = None
        self._pending = ""

    def open(self) -> None:
        try:
            self._file = open(
                self.path, encoding=self.encoding, errors="replace", newline=""
            )
        except OSError as e:
            raise SourceUnavailable(f"Source illisible : {self.path}") from e

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def readline(self) -> Optional[str]:
        if self._file is None:
            raise SourceUnavailable(f"Source non ouverte : {self.path}")
        chunk = self._file.readline()
        if not chunk:
            # Le fragment n'a pas grandi depuis la lecture précédente :
            # on le considère comme une ligne terminée.
            if self._pending:
                line, self._pending = self._pending, ""
                return line.rstrip("\r\n")
            return None
        if not chunk.endswith("\n"):
            self._pending += chunk
            return None
        line, self._pending = self._pending + chunk, ""
        return line.rstrip("\r\n")


def read_first_line(path: str | Path, encoding: str = "utf-8") -> str:
    """
    Lit la première ligne d'un fichier (chaîne vide si le fichier est vide).

    Les octets invalides sont remplacés par U+FFFD : ils donnent un
    identifiant inconnu au lieu d'interrompre la lecture.
    """
    try:
        with open(path, encoding=encoding, errors="replace") as f:
            return f.readline().rstrip("\r\n")
    except OSError as e:
        raise SourceUnavailable(f"Source illisible : {path}") from e
