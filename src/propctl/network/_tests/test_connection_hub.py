from __future__ import annotations

import asyncio
import json

from aiohttp.test_utils import TestClient, TestServer

from propctl.core.events import Event, EventBus
from propctl.network.hub import ConnectionHub


class _Prop:
    """Minimal prop side of the hub."""

    def __init__(self) -> None:
        self.bus = EventBus()
        self.received: list[dict] = []
        self.state = {"state": "inactive"}

    def greeting(self) -> list[dict]:
        return [{"type": "config", "mock": True}, {"type": "state", **self.state}]

    def on_message(self, message: dict):
        self.received.append(message)
        if message["type"] == "ready":
            return [{"type": "state", **self.state}]
        if message["type"] == "explode":
            raise RuntimeError("boom")
        return None


def _hub(prop: _Prop) -> ConnectionHub:
    hub = ConnectionHub(prop.greeting, prop.on_message)
    hub.attach(prop.bus)
    return hub


async def _next(ws) -> dict:
    return json.loads(await asyncio.wait_for(ws.receive_str(), 2.0))


def test_greeting_then_events_in_order():
    async def scenario():
        prop = _Prop()
        hub = _hub(prop)
        async with TestClient(TestServer(hub.app)) as client:
            ws = await client.ws_connect("/ws")
            assert await _next(ws) == {"type": "config", "mock": True}
            assert await _next(ws) == {"type": "state", "state": "inactive"}

            for n in range(5):
                prop.bus.emit(Event("tick", data={"n": n}))
            ticks = [await _next(ws) for _ in range(5)]
            assert [t["n"] for t in ticks] == list(range(5))
            assert all(t["type"] == "tick" for t in ticks)
            await ws.close()

    asyncio.run(scenario())


def test_broadcast_reaches_every_client():
    async def scenario():
        prop = _Prop()
        hub = _hub(prop)
        async with TestClient(TestServer(hub.app)) as client:
            first = await client.ws_connect("/ws")
            second = await client.ws_connect("/")
            for ws in (first, second):
                await _next(ws)
                await _next(ws)
            assert hub.client_count == 2

            prop.bus.emit(Event("solved"))

            assert (await _next(first))["type"] == "solved"
            assert (await _next(second))["type"] == "solved"
            await first.close()
            await second.close()

    asyncio.run(scenario())


def test_malformed_frames_are_dropped_and_replies_go_to_sender():
    async def scenario():
        prop = _Prop()
        hub = _hub(prop)
        async with TestClient(TestServer(hub.app)) as client:
            sender = await client.ws_connect("/ws")
            other = await client.ws_connect("/ws")
            for ws in (sender, other):
                await _next(ws)
                await _next(ws)

            await sender.send_str("{not json")
            await sender.send_str('{"type": "explode"}')
            await sender.send_str('{"type": "ready"}')

            assert await _next(sender) == {"type": "state", "state": "inactive"}
            assert [m["type"] for m in prop.received] == ["explode", "ready"]

            prop.bus.emit(Event("ping"))
            assert (await _next(other))["type"] == "ping"
            await sender.close()
            await other.close()

    asyncio.run(scenario())


def test_disconnected_clients_are_forgotten():
    async def scenario():
        prop = _Prop()
        hub = _hub(prop)
        async with TestClient(TestServer(hub.app)) as client:
            ws = await client.ws_connect("/ws")
            await _next(ws)
            await ws.close()
            for _ in range(50):
                if hub.client_count == 0:
                    break
                await asyncio.sleep(0.01)
            assert hub.client_count == 0
            prop.bus.emit(Event("ping"))

    asyncio.run(scenario())


def test_root_without_assets_is_not_found():
    async def scenario():
        hub = _hub(_Prop())
        async with TestClient(TestServer(hub.app)) as client:
            response = await client.get("/")
            assert response.status == 404

    asyncio.run(scenario())


def test_root_serves_index(tmp_path):
    (tmp_path / "index.html").write_text("<h1>map</h1>")

    async def scenario():
        prop = _Prop()
        hub = ConnectionHub(prop.greeting, prop.on_message, public_dir=tmp_path)
        async with TestClient(TestServer(hub.app)) as client:
            response = await client.get("/")
            assert response.status == 200
            assert "map" in await response.text()

    asyncio.run(scenario())
