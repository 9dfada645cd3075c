"""
Message Bus.

Point unique de dispatch des commands et events vers leurs handlers.

Les dépendances sont liées aux handlers une fois pour toutes, à la
construction du bus (`functools.partial`) : un handler qui réclame
une dépendance inconnue fait échouer l'assemblage, pas le traitement
de la première ligne. Après chaque message, le bus récupère les
événements émis par le contexte et les traite à leur tour.

Une command a un seul handler et ses erreurs remontent à l'appelant ;
un event a 0 à N handlers dont les erreurs sont seulement loggées.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections import deque
from typing import Any, Callable, Union

from fulfillment.domain import commands, events
from fulfillment.service_layer.context import FulfillmentContext

logger = logging.getLogger(__name__)

Message = Union[commands.Command, events.Event]


def inject_dependencies(handler: Callable, dependencies: dict[str, Any]) -> Callable:
    """
    Lie au handler les dépendances qu'il déclare, par nom de paramètre.

    Le premier paramètre reste libre : c'est le message.
    """
    params = list(inspect.signature(handler).parameters.values())[1:]
    kwargs: dict[str, Any] = {}
    for param in params:
        if param.name in dependencies:
            kwargs[param.name] = dependencies[param.name]
        elif param.default is inspect.Parameter.empty:
            raise ValueError(
                f"Dépendance {param.name!r} introuvable pour {handler.__qualname__}"
            )
    return functools.partial(handler, **kwargs)


class MessageBus:
    def __init__(
        self,
        ctx: FulfillmentContext,
        event_handlers: dict[type[events.Event], list[Callable]],
        command_handlers: dict[type[commands.Command], Callable],
        dependencies: dict[str, Any] | None = None,
    ):
        self.ctx = ctx
        self.dependencies = {"ctx": ctx, **(dependencies or {})}
        self.event_handlers = {
            event_type: [inject_dependencies(h, self.dependencies) for h in handlers]
            for event_type, handlers in event_handlers.items()
        }
        self.command_handlers = {
            command_type: inject_dependencies(handler, self.dependencies)
            for command_type, handler in command_handlers.items()
        }
        self.queue: deque[Message] = deque()

    def handle(self, message: Message) -> list[Any]:
        """
        Traite un message puis tous les événements qui en découlent.

        Retourne les résultats des commands traitées, dans l'ordre.
        """
        self.queue = deque([message])
        results: list[Any] = []
        while self.queue:
            message = self.queue.popleft()
            if isinstance(message, commands.Command):
                results.append(self._dispatch_command(message))
            elif isinstance(message, events.Event):
                self._dispatch_event(message)
            else:
                raise ValueError(f"Message de type inconnu : {type(message)}")
            self.queue.extend(self.ctx.collect_new_events())
        return results

    def _dispatch_command(self, command: commands.Command) -> Any:
        handler = self.command_handlers.get(type(command))
        if handler is None:
            raise ValueError(f"Aucun handler pour la command {type(command)}")
        logger.debug("Command %s -> %s", command, handler.func.__qualname__)
        return handler(command)

    def _dispatch_event(self, event: events.Event) -> None:
        for handler in self.event_handlers.get(type(event), []):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Erreur lors du traitement de l'event %s par %s",
                    event, handler.func.__qualname__,
                )
