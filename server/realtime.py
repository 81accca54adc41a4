"""Socket.IO transport for the relay.

Each connection gets an :class:`OutboundChannel` and a writer task that
drains it into ``sio.emit(..., to=sid)``, so events reach every client in
the order they were broadcast. Inbound events are forwarded as-is to the
relay's router.
"""

from __future__ import annotations

import asyncio
import logging
import os
from functools import partial
from pathlib import Path
from typing import Any

import socketio
from dotenv import load_dotenv

from chatrelay import Relay, RelayConfig
from chatrelay.broadcast import OutboundChannel

log = logging.getLogger(__name__)


def _config_from_env() -> RelayConfig:
    load_dotenv()
    fields: dict[str, Any] = {
        "data_dir": Path(os.environ.get("CHATRELAY_DATA_DIR", str(Path.home() / ".chatrelay"))),
        "port": int(os.environ.get("PORT", "4000")),
    }
    if upload_dir := os.environ.get("CHATRELAY_UPLOAD_DIR"):
        fields["upload_dir"] = Path(upload_dir)
    if interval := os.environ.get("CHATRELAY_HEARTBEAT_INTERVAL"):
        fields["heartbeat_interval"] = float(interval)
    if ttl := os.environ.get("CHATRELAY_SESSION_TTL"):
        fields["session_ttl"] = float(ttl)
    return RelayConfig(**fields)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
    logger=False,
    engineio_logger=False,
)

relay = Relay(_config_from_env())

_writers: dict[str, tuple[OutboundChannel, asyncio.Task[None]]] = {}
# Writers of closed connections, held until their pump has flushed.
_draining: set[asyncio.Task[None]] = set()


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    channel = OutboundChannel()
    task = asyncio.get_running_loop().create_task(channel.pump(partial(sio.emit, to=sid)))
    _writers[sid] = (channel, task)
    relay.connect(sid, channel)
    log.info("socket connected: %s", sid)


@sio.event
async def disconnect(sid: str, *args: Any):
    relay.disconnect(sid)
    writer = _writers.pop(sid, None)
    if writer is not None:
        channel, task = writer
        _draining.add(task)
        task.add_done_callback(_draining.discard)
        channel.close()


@sio.on("*")
async def any_event(event: str, sid: str, data: Any = None):
    relay.dispatch(sid, event, data)


async def close_all() -> None:
    """Stop every writer task; used at shutdown."""
    writers = list(_writers.values())
    _writers.clear()
    tasks = [task for _, task in writers] + list(_draining)
    for channel, _task in writers:
        channel.close()
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
