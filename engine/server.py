"""WebSocket server: one game per connection, intent dispatch, deferred ticks."""

import asyncio
import traceback
from typing import Optional
import websockets
from websockets.asyncio.server import serve, ServerConnection

from shared.constants import (
    MessageType, ItemType, BlockKind, DEFAULT_HOST, DEFAULT_PORT, TICK_INTERVAL_S,
)
from shared.models import GameSettings
from shared.protocol import create_message, parse_message, coord_from_payload
from engine.game_state import GameState
from engine.event_logger import describe_event


class PlayerSession:
    """A connected player and the game they are playing."""

    def __init__(self, ws: ServerConnection, game_state: Optional[GameState] = None):
        self.ws = ws
        self.game_state = game_state
        self.connected = True
        self.game_over_sent = False
        self.last_tick: Optional[float] = None

    async def send(self, message: str):
        if not self.connected:
            return
        try:
            await self.ws.send(message)
        except Exception:
            self.connected = False


class GameServer:
    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 tick_interval: float = TICK_INTERVAL_S):
        self.host = host
        self.port = port
        self.tick_interval = tick_interval
        self.sessions: dict[ServerConnection, PlayerSession] = {}

    async def handle_connection(self, ws: ServerConnection):
        print(f"[server] New connection from {ws.remote_address}")
        session = PlayerSession(ws)
        self.sessions[ws] = session
        ticker = asyncio.create_task(self._tick_loop(session))
        try:
            async for raw_message in ws:
                try:
                    msg_type, payload = parse_message(raw_message)
                except ValueError as e:
                    print(f"[server] Parse error: {e}")
                    await session.send(create_message(MessageType.ERROR, {"message": "Invalid message format"}))
                    continue

                print(f"[server] Received {msg_type.value}")
                try:
                    await self._handle_game_message(session, msg_type, payload)
                except Exception as e:
                    print(f"[server] Error handling {msg_type.value}: {e}")
                    traceback.print_exc()
                    await session.send(create_message(MessageType.ERROR,
                        {"message": "Server error processing action"}))
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            session.connected = False
            ticker.cancel()
            self.sessions.pop(ws, None)
            print(f"[server] Connection closed: {ws.remote_address}")

    async def _handle_game_message(self, session: PlayerSession, msg_type: MessageType, payload: dict):
        if msg_type == MessageType.NEW_GAME:
            settings = GameSettings.from_dict(payload.get("settings"))
            if session.game_state is None:
                session.game_state = GameState(settings)
            else:
                session.game_state.reset(settings)
            session.game_over_sent = False
            session.last_tick = asyncio.get_running_loop().time()
            await session.send(create_message(MessageType.GAME_STATE, {
                "state": session.game_state.get_snapshot().to_dict(),
            }))
            print(f"[game] New game {settings.to_dict()}")
            return

        gs = session.game_state
        if gs is None:
            await session.send(create_message(MessageType.ERROR, {"message": "No game in progress"}))
            return

        if msg_type == MessageType.MOVE:
            src = coord_from_payload(payload, "src")
            dst = coord_from_payload(payload, "dst")
            if src is None or dst is None:
                await session.send(create_message(MessageType.ERROR, {"message": "Invalid cell"}))
                return
            error, events = gs.move(src, dst)

        elif msg_type == MessageType.TAP:
            cell = coord_from_payload(payload)
            if cell is None:
                await session.send(create_message(MessageType.ERROR, {"message": "Invalid cell"}))
                return
            error, events = gs.tap(*cell)

        elif msg_type == MessageType.USE_ITEM:
            cell = coord_from_payload(payload)
            try:
                item = ItemType(payload.get("item"))
            except ValueError:
                item = None
            if cell is None or item is None:
                await session.send(create_message(MessageType.ERROR, {"message": "Invalid item or cell"}))
                return
            error, events = gs.use_item(item, *cell)

        elif msg_type == MessageType.CUSTOMIZE:
            cell = coord_from_payload(payload)
            try:
                kind = BlockKind(payload["kind"]) if payload.get("kind") else None
            except ValueError:
                kind = None
            if cell is None:
                await session.send(create_message(MessageType.ERROR, {"message": "Invalid cell"}))
                return
            error, events = gs.customize(*cell, color=payload.get("color"), kind=kind)

        else:
            await session.send(create_message(MessageType.ERROR,
                {"message": f"Unexpected message {msg_type.value}"}))
            return

        if error:
            print(f"[game] {describe_event(events[0])}")
        await self._send_result(session, events)

    async def _send_result(self, session: PlayerSession, events: list):
        gs = session.game_state
        for event in events:
            if event["type"] != "rejected":
                print(f"[game] {describe_event(event)}")
        await session.send(create_message(MessageType.ACTION_RESULT, {
            "events": events,
            "state": gs.get_snapshot().to_dict(),
        }))
        if gs.game_over and not session.game_over_sent:
            session.game_over_sent = True
            await session.send(create_message(MessageType.GAME_OVER, {"score": gs.score}))

    async def _tick_loop(self, session: PlayerSession):
        """Feed wall-clock time into the session's scheduler."""
        loop = asyncio.get_running_loop()
        while session.connected:
            await asyncio.sleep(self.tick_interval)
            gs = session.game_state
            if gs is None:
                continue
            now = loop.time()
            if session.last_tick is None:
                session.last_tick = now
                continue
            elapsed_ms = int((now - session.last_tick) * 1000)
            if elapsed_ms <= 0:
                continue
            session.last_tick += elapsed_ms / 1000
            before = gs.time_left()
            events = gs.advance(elapsed_ms)
            if events or gs.time_left() != before:
                await self._send_result(session, events)

    async def run(self):
        async with serve(self.handle_connection, self.host, self.port):
            print(f"Server running on ws://{self.host}:{self.port}")
            await asyncio.Future()  # run forever


async def main(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
    server = GameServer(host, port)
    await server.run()
