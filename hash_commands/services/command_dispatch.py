"""Command Dispatch — validate-then-run routing from hash method to runner.

Invariants:
    - Every method->runner mapping is supplied at construction; nothing hardcoded
    - validate() scans the WHOLE sequence before any runner is invoked:
      one unknown or unsafe command blocks every command, earlier ones included
    - is_safe is called fresh on every validation (never memoised)
    - run() awaits each runner before starting the next (never concurrent)
    - run_once() clears the pending sequence only after a fully successful run

Design Decisions:
    - Explicit dict over getattr: the available methods are enumerable up front
    - Runner failures wrapped in CommandExecutionError with the original as
      __cause__; commands already executed are not rolled back
    - No lock here: concurrent dispatch on one instance is out of contract and
      is prevented by the caller (see api/routes/hash_commands.py)
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from hash_commands.core.errors import (
    CommandExecutionError,
    CommandRejectedError,
    ErrorContext,
)
from hash_commands.core.hash_command import CommandArgs, HashCommand
from hash_commands.core.parse_hash import DiagnosticSink, parse_hash

logger = logging.getLogger(__name__)

Runner = Callable[[str, CommandArgs], Any]
SafetyCheck = Callable[[str], bool]


@dataclass(frozen=True)
class DispatcherEntry:
    """One dispatcher family: how to run a command and whether it may run."""
    runner: Runner
    is_safe: SafetyCheck


class CommandDispatch:
    """Routes HashCommand.method -> DispatcherEntry. Holds the pending sequence."""

    def __init__(
        self,
        dispatchers: Mapping[str, DispatcherEntry],
        raw_hash: str | None = None,
        warn: DiagnosticSink | None = None,
    ):
        self._dispatchers = dict(dispatchers)
        self._warn = warn
        self.commands: tuple[HashCommand, ...] = self.parse(raw_hash)

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self._dispatchers)

    def parse(self, raw_hash: str | None) -> tuple[HashCommand, ...]:
        return parse_hash(raw_hash, self._dispatchers, self._warn)

    def load(self, raw_hash: str | None) -> tuple[HashCommand, ...]:
        """Replace the pending sequence with the commands found in raw_hash."""
        self.commands = self.parse(raw_hash)
        logger.debug(f"Loaded {len(self.commands)} hash command(s)")
        return self.commands

    def validate(self, commands: Iterable[HashCommand]) -> None:
        """Raise CommandRejectedError on the first unknown or unsafe command."""
        for position, hash_command in enumerate(commands):
            dispatcher = self._dispatchers.get(hash_command.method)
            if dispatcher is None:
                raise self._rejection(
                    hash_command, position,
                    "No dispatcher found for the command: "
                    f"`{hash_command.command}`.",
                )
            if not dispatcher.is_safe(hash_command.command):
                raise self._rejection(
                    hash_command, position,
                    "Attempting to run unsafe or non exist command: "
                    f"`{hash_command.command}`.",
                )

    async def run(self, commands: Iterable[HashCommand] | None = None) -> int:
        """Validate all, then run each command in order. Returns count run."""
        sequence = tuple(self.commands if commands is None else commands)
        self.validate(sequence)

        for position, hash_command in enumerate(sequence):
            await self._run_one(hash_command, position)
        return len(sequence)

    async def run_once(self) -> int:
        """Run the pending sequence, clearing it only if every command succeeded."""
        executed = await self.run(self.commands)
        self.commands = ()
        return executed

    async def _run_one(self, hash_command: HashCommand, position: int) -> None:
        dispatcher = self._dispatchers[hash_command.method]
        try:
            result = dispatcher.runner(hash_command.command, hash_command.args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            context = ErrorContext(
                method=hash_command.method,
                command=hash_command.command,
                position=position,
            )
            error = CommandExecutionError(hash_command.command, str(e), context)
            logger.error(
                error.message,
                extra=_log_extra(hash_command, error.code, position),
            )
            raise error from e
        logger.debug(
            f"Ran {hash_command.method} `{hash_command.command}`",
            extra=_log_extra(hash_command, None, position),
        )

    def _rejection(
        self, hash_command: HashCommand, position: int, message: str,
    ) -> CommandRejectedError:
        context = ErrorContext(
            method=hash_command.method,
            command=hash_command.command,
            position=position,
        )
        error = CommandRejectedError(message, context)
        logger.warning(
            message, extra=_log_extra(hash_command, error.code, position),
        )
        return error


def _log_extra(
    hash_command: HashCommand, error_code: str | None, position: int,
) -> dict:
    return {
        "method": hash_command.method,
        "command": hash_command.command,
        "error_code": error_code,
        "position": position,
    }
