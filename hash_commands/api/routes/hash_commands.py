"""Hash Command Routes — parse, hold, and dispatch URL fragment commands.

Invariants:
    - One dispatch at a time per application: a run requested while another is
      in flight is refused with ConcurrencyError (409), never interleaved
    - Parsing endpoints never fail on malformed fragments (they return fewer commands)
    - The pending sequence lives on app.state.dispatch and is cleared only by a
      successful POST /pending/run

Design Decisions:
    - asyncio.Lock checked with locked() instead of awaited: a queued second
      dispatch would run against state the first one already changed
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request

from hash_commands.core.errors import ConcurrencyError
from hash_commands.schemas.hash_command import (
    CommandListResponse,
    HashRequest,
    RunResponse,
)
from hash_commands.services.command_dispatch import CommandDispatch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/hash-commands", tags=["hash-commands"])


def get_dispatch(request: Request) -> CommandDispatch:
    return request.app.state.dispatch


def get_dispatch_lock(request: Request) -> asyncio.Lock:
    return request.app.state.dispatch_lock


@router.post("/parse", response_model=CommandListResponse)
async def parse_commands(
    body: HashRequest, dispatch: CommandDispatch = Depends(get_dispatch),
):
    """Parse a fragment without storing or running it."""
    return CommandListResponse.from_commands(dispatch.parse(body.hash))


@router.get("/pending", response_model=CommandListResponse)
async def get_pending(dispatch: CommandDispatch = Depends(get_dispatch)):
    return CommandListResponse.from_commands(dispatch.commands)


@router.put("/pending", response_model=CommandListResponse)
async def load_pending(
    body: HashRequest,
    dispatch: CommandDispatch = Depends(get_dispatch),
    lock: asyncio.Lock = Depends(get_dispatch_lock),
):
    """Replace the pending sequence with the commands found in the fragment."""
    _ensure_idle(lock)
    return CommandListResponse.from_commands(dispatch.load(body.hash))


@router.post("/pending/run", response_model=RunResponse)
async def run_pending(
    dispatch: CommandDispatch = Depends(get_dispatch),
    lock: asyncio.Lock = Depends(get_dispatch_lock),
):
    """Validate and run the pending sequence; clears it on success."""
    _ensure_idle(lock)
    async with lock:
        executed = await dispatch.run_once()
    logger.info(f"Pending hash commands executed: {executed}")
    return RunResponse(executed=executed)


@router.post("/run", response_model=RunResponse)
async def run_commands(
    body: HashRequest,
    dispatch: CommandDispatch = Depends(get_dispatch),
    lock: asyncio.Lock = Depends(get_dispatch_lock),
):
    """Parse the fragment, then validate and run it. Pending state untouched."""
    _ensure_idle(lock)
    async with lock:
        executed = await dispatch.run(dispatch.parse(body.hash))
    return RunResponse(executed=executed)


def _ensure_idle(lock: asyncio.Lock) -> None:
    if lock.locked():
        raise ConcurrencyError(
            "A hash command dispatch is already running. Retry once it settles.",
        )
