"""Command Registry & Route Table — the two standard runner families.

Invariants:
    - CommandRegistry.is_safe(name) is a live lookup: unregistering a command or
      re-registering it with a different flag changes the answer immediately
    - Unknown names are never safe; unknown commands/routes raise
      ResourceNotFoundError when run
    - build_default_dispatchers() is the only place the "e:run" / "e:route"
      families are wired; CommandDispatch itself knows no method names

Design Decisions:
    - Safety lives on CommandInfo metadata, next to the handler, so the registry
      (not the dispatcher) decides which names may be run from a URL
    - Routes are always considered safe; navigating to an unregistered route
      fails at run time instead
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from hash_commands.config import get_settings
from hash_commands.core.errors import ResourceNotFoundError
from hash_commands.core.hash_command import CommandArgs
from hash_commands.services.command_dispatch import DispatcherEntry

logger = logging.getLogger(__name__)

Handler = Callable[[CommandArgs], Any]


async def _call(handler: Handler | None, args: CommandArgs) -> Any:
    if handler is None:
        return None
    result = handler(args)
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass(frozen=True)
class CommandInfo:
    """Registry metadata for one named command."""
    name: str
    handler: Handler
    is_safe: bool = False


class CommandRegistry:
    """Named operations that "e:run" tokens may invoke."""

    def __init__(self):
        self._commands: dict[str, CommandInfo] = {}

    def register(
        self, name: str, handler: Handler, *, is_safe: bool = False,
    ) -> CommandInfo:
        info = CommandInfo(name=name, handler=handler, is_safe=is_safe)
        self._commands[name] = info
        return info

    def unregister(self, name: str) -> None:
        self._commands.pop(name, None)

    def get_info(self, name: str) -> CommandInfo | None:
        return self._commands.get(name)

    def is_safe(self, name: str) -> bool:
        info = self._commands.get(name)
        return info is not None and info.is_safe

    async def run(self, name: str, args: CommandArgs) -> Any:
        info = self._commands.get(name)
        if info is None:
            raise ResourceNotFoundError("Command", name)
        logger.info(f"Running command `{name}`", extra={"command": name})
        return await _call(info.handler, args)


class RouteTable:
    """Navigable routes that "e:route" tokens may open."""

    def __init__(self):
        self._routes: dict[str, Handler | None] = {}
        self.current: str | None = None
        self.history: list[str] = []

    def register(self, name: str, handler: Handler | None = None) -> None:
        self._routes[name] = handler

    def is_registered(self, name: str) -> bool:
        return name in self._routes

    async def navigate(self, name: str, args: CommandArgs) -> Any:
        if name not in self._routes:
            raise ResourceNotFoundError("Route", name)
        result = await _call(self._routes[name], args)
        self.current = name
        self.history.append(name)
        logger.info(f"Navigated to route `{name}`", extra={"command": name})
        return result


def build_default_dispatchers(
    registry: CommandRegistry, routes: RouteTable,
) -> dict[str, DispatcherEntry]:
    """Standard method table: run registered commands, open registered routes."""
    settings = get_settings()
    return {
        settings.run_method: DispatcherEntry(
            runner=registry.run,
            is_safe=registry.is_safe,
        ),
        settings.route_method: DispatcherEntry(
            runner=routes.navigate,
            is_safe=lambda _name: True,
        ),
    }
