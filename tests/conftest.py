import asyncio
import json
import logging

import pytest
from fastapi.websockets import WebSocketDisconnect
from websockets.exceptions import ConnectionClosedOK


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class FakeTelephonySocket:
    """Stands in for the FastAPI WebSocket of a Twilio media stream.

    Frames queued with ``push`` are returned by ``receive_text``; ``hang_up``
    simulates the peer closing the socket with a close code.
    """

    def __init__(self, messages=None):
        self.incoming = asyncio.Queue()
        self.sent = []
        self.accepted = False
        self.closed = False
        for message in messages or []:
            self.push(message)

    def push(self, message):
        if isinstance(message, dict):
            message = json.dumps(message)
        self.incoming.put_nowait(message)

    def hang_up(self, code=1000):
        self.incoming.put_nowait(WebSocketDisconnect(code=code))

    async def accept(self):
        self.accepted = True

    async def receive_text(self):
        item = await self.incoming.get()
        if item is None:
            raise WebSocketDisconnect(code=1000)
        if isinstance(item, Exception):
            raise item
        return item

    async def send_text(self, data):
        self.sent.append(json.loads(data))

    async def close(self):
        self.closed = True
        self.incoming.put_nowait(None)


class FakeModelSocket:
    """Stands in for the websockets client connection to the voice model."""

    def __init__(self):
        self.incoming = asyncio.Queue()
        self.sent = []
        self.closed = False
        self.close_calls = 0

    def push(self, event):
        if isinstance(event, dict):
            event = json.dumps(event)
        self.incoming.put_nowait(event)

    def sent_of_type(self, event_type):
        return [message for message in self.sent if message.get("type") == event_type]

    async def send(self, message):
        if self.closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(json.loads(message))

    async def close(self):
        self.close_calls += 1
        self.closed = True
        self.incoming.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self.incoming.get()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item


class FakeConnector:
    """Connector returning a prepared model socket, or raising ``error``."""

    def __init__(self, socket=None, error=None):
        self.socket = socket
        self.error = error
        self.connect_calls = 0

    async def connect(self):
        self.connect_calls += 1
        if self.error is not None:
            raise self.error
        return self.socket


class GatedConnector(FakeConnector):
    """Connector whose connect blocks until ``release`` is called."""

    def __init__(self, socket=None, error=None):
        super().__init__(socket, error)
        self.gate = asyncio.Event()
        self.waiting = False

    def release(self):
        self.gate.set()

    async def connect(self):
        self.waiting = True
        await self.gate.wait()
        return await super().connect()


async def wait_until(predicate, timeout=1.0):
    """Yield to the event loop until ``predicate()`` is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def fakes():
    """Fake transports used by the link and bridge tests."""

    class Fakes:
        TelephonySocket = FakeTelephonySocket
        ModelSocket = FakeModelSocket
        Connector = FakeConnector
        GatedConnector = GatedConnector

    Fakes.wait_until = staticmethod(wait_until)
    return Fakes
