"""Fragment Parser — turns a raw URL hash into an ordered tuple of HashCommands.

Grammar:
    #<token>(&<token>)*
    token = <namespace>:<qualifier>:<name>[?<uri-encoded-JSON-args>]

Invariants:
    - parse_hash never raises for bad input; a bad token is simply not a command
    - Output order == left-to-right token order in the hash
    - Tokens with a colon-segment count other than 3 are dropped, never repaired
    - Tokens whose method is not in the supplied table are dropped
    - Undecodable args (NaN and Infinity included) degrade to {} after one
      call to the diagnostic sink; a failing sink is logged, never raised

Design Decisions:
    - Pure functions: the method table and diagnostic sink are injected
    - Only the first "?" splits command from args; later "?" stay in the payload
      and normally fail JSON decoding (degrade path, not a parser bug)
    - Args are fully percent-decoded so encoded ":" and "," inside JSON survive
"""

import json
import logging
import re
from typing import Callable, Collection
from urllib.parse import unquote

from hash_commands.core.hash_command import CommandArgs, HashCommand

logger = logging.getLogger(__name__)

DiagnosticSink = Callable[[str, Exception], None]

EMPTY_ARGS = "{}"
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _log_warning(message: str, error: Exception) -> None:
    logger.warning(f"{message}{error}", exc_info=error)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _report(warn: DiagnosticSink | None, error: Exception) -> None:
    message = "Hash commands JSON args cannot be parsed. \n\n"
    if warn is None:
        _log_warning(message, error)
        return
    try:
        warn(message, error)
    except Exception:
        logger.exception("Diagnostic sink failed while reporting bad args")


def uri_decode(raw: str) -> str:
    """Percent-decode raw, failing on malformed escapes or invalid UTF-8."""
    match = _MALFORMED_ESCAPE.search(raw)
    if match:
        raise ValueError(f"Malformed percent-escape at offset {match.start()}")
    return unquote(raw, errors="strict")


def decode_args(
    raw_args: str | None, warn: DiagnosticSink | None = None,
) -> CommandArgs:
    """Decode a URI-encoded JSON object. Any failure → warn + {}."""
    try:
        decoded = json.loads(
            uri_decode(raw_args or EMPTY_ARGS),
            parse_constant=_reject_constant,
        )
        if not isinstance(decoded, dict):
            raise ValueError(
                f"Expected a JSON object, got {type(decoded).__name__}",
            )
        return decoded
    except (ValueError, RecursionError) as e:
        _report(warn, e)
        return {}


def parse_token(
    token: str, methods: Collection[str], warn: DiagnosticSink | None = None,
) -> HashCommand | None:
    """Parse one '&'-delimited token. Returns None when it is not a command."""
    raw_command, _, raw_args = token.partition("?")
    parts = raw_command.split(":")
    if len(parts) != 3:
        return None

    method = f"{parts[0]}:{parts[1]}"
    if method not in methods:
        return None

    return HashCommand(
        method=method,
        command=parts[2],
        args=decode_args(raw_args, warn),
    )


def parse_hash(
    raw_hash: str | None,
    methods: Collection[str],
    warn: DiagnosticSink | None = None,
) -> tuple[HashCommand, ...]:
    """Parse a URL fragment (with or without leading '#') into commands."""
    if not raw_hash:
        return ()

    body = raw_hash[1:] if raw_hash.startswith("#") else raw_hash
    commands = []
    for token in body.split("&"):
        command = parse_token(token, methods, warn)
        if command is not None:
            commands.append(command)
    return tuple(commands)
