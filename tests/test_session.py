"""Tests for the TCP control channel, against a loopback fake outlet."""

import asyncio
import re
import socket
import time

import pytest

from reco_protocol import (
    RecoOutlet,
    RecoError,
    RecoConnectionError,
    RecoTransportError,
    RecoTimeoutError,
    RecoProtocolError,
    MalformedResponseError,
)
from reco_protocol.session import RecoOutletSession


class FakeOutlet:
    """A loopback TCP server that records each command and replies with a canned frame."""

    def __init__(self, reply, close_without_reply=False):
        self.reply = reply
        self.close_without_reply = close_without_reply
        self.commands = []
        self.server = None

    async def handle(self, reader, writer):
        data = await reader.readline()
        self.commands.append(data.decode("ascii"))
        if not self.close_without_reply and self.reply is not None:
            writer.write(self.reply)
            await writer.drain()
        if self.reply is None and not self.close_without_reply:
            # never reply; wait for the client to hang up
            await reader.read()
        writer.close()

    async def __aenter__(self):
        self.server = await asyncio.start_server(self.handle, "127.0.0.1", 0)
        return self

    async def __aexit__(self, *exc):
        self.server.close()
        await self.server.wait_closed()
        return False

    @property
    def port(self):
        return self.server.sockets[0].getsockname()[1]


def unused_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.mark.asyncio
async def test_power_on_sends_switch_command():
    async with FakeOutlet(b"+ok\r\n") as fake:
        outlet = RecoOutlet("127.0.0.1", port=fake.port, timeout_secs=2.0)
        await outlet.power_on()
    assert len(fake.commands) == 1
    assert re.fullmatch(r"AT\+YZSWITCH=1,ON,\d{12}\r\n", fake.commands[0])


@pytest.mark.asyncio
async def test_power_off_with_delay_sends_delay_command():
    async with FakeOutlet(b"+ok\r\n") as fake:
        outlet = RecoOutlet("127.0.0.1", port=fake.port, timeout_secs=2.0)
        await outlet.power_off(delay_minutes=10, slot=2)
    assert re.fullmatch(r"AT\+YZDELAY=2,OFF,10,\d{12}\r\n", fake.commands[0])


@pytest.mark.asyncio
async def test_read_power():
    async with FakeOutlet(b"+ok=123,2300,5000,1100,0,5000,0\r\n") as fake:
        outlet = RecoOutlet("127.0.0.1", port=fake.port, timeout_secs=2.0)
        info = await outlet.read_power()
    assert fake.commands == ["AT+YZOUT\r\n"]
    assert (info.current, info.voltage, info.frequency, info.active_power) == (123, 2300, 5000, 1100)
    assert (info.reactive_power, info.active_energy, info.reactive_energy) == (0, 5000, 0)


@pytest.mark.asyncio
async def test_read_power_short_frame_is_malformed():
    async with FakeOutlet(b"+ok=123,2300\r\n") as fake:
        outlet = RecoOutlet("127.0.0.1", port=fake.port, timeout_secs=2.0)
        with pytest.raises(MalformedResponseError):
            await outlet.read_power()


@pytest.mark.asyncio
async def test_failure_response_raises_protocol_error():
    async with FakeOutlet(b"+ERR=-1\r\n") as fake:
        outlet = RecoOutlet("127.0.0.1", port=fake.port, timeout_secs=2.0)
        with pytest.raises(RecoProtocolError) as exc_info:
            await outlet.power_on()
    assert exc_info.value.raw_response == "+ERR=-1"


@pytest.mark.asyncio
async def test_no_response_times_out():
    async with FakeOutlet(None) as fake:
        outlet = RecoOutlet("127.0.0.1", port=fake.port, timeout_secs=0.2)
        with pytest.raises(RecoTimeoutError):
            await outlet.read_power()


@pytest.mark.asyncio
async def test_close_without_response_is_transport_error():
    async with FakeOutlet(None, close_without_reply=True) as fake:
        outlet = RecoOutlet("127.0.0.1", port=fake.port, timeout_secs=2.0)
        with pytest.raises(RecoTransportError):
            await outlet.read_power()


@pytest.mark.asyncio
async def test_connect_refused_raises_connection_error():
    outlet = RecoOutlet("127.0.0.1", port=unused_port(), timeout_secs=2.0)
    with pytest.raises(RecoConnectionError):
        await outlet.power_on()


class FakeWriter:
    def __init__(self, drain_exc=None, hang_on_close=False):
        self.drain_exc = drain_exc
        self.hang_on_close = hang_on_close
        self.written = []
        self.closed = False

    def write(self, data):
        self.written.append(bytes(data))

    async def drain(self):
        if self.drain_exc is not None:
            raise self.drain_exc

    def close(self):
        self.closed = True

    async def wait_closed(self):
        if self.hang_on_close:
            await asyncio.Event().wait()


@pytest.mark.asyncio
async def test_connect_failure_does_not_write(monkeypatch):
    attempts = []

    async def fake_open_connection(host, port):
        attempts.append((host, port))
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(asyncio, "open_connection", fake_open_connection)
    outlet = RecoOutlet("192.0.2.1", port=8899, timeout_secs=1.0)
    with pytest.raises(RecoConnectionError):
        await outlet.power_on()
    assert attempts == [("192.0.2.1", 8899)]


@pytest.mark.asyncio
async def test_write_failure_raises_transport_error_and_closes(monkeypatch):
    writer = FakeWriter(drain_exc=ConnectionResetError("reset"))
    reader = asyncio.StreamReader()

    async def fake_open_connection(host, port):
        return reader, writer

    monkeypatch.setattr(asyncio, "open_connection", fake_open_connection)
    outlet = RecoOutlet("192.0.2.1", timeout_secs=1.0)
    with pytest.raises(RecoTransportError):
        await outlet.power_off()
    assert writer.written and writer.written[0].startswith(b"AT+YZSWITCH=1,OFF,")
    assert writer.closed


@pytest.mark.asyncio
async def test_connection_closed_after_success(monkeypatch):
    writer = FakeWriter()
    reader = asyncio.StreamReader()
    reader.feed_data(b"+ok\r\n")

    async def fake_open_connection(host, port):
        return reader, writer

    monkeypatch.setattr(asyncio, "open_connection", fake_open_connection)
    await RecoOutlet("192.0.2.1", timeout_secs=1.0).power_on()
    assert writer.closed


@pytest.mark.asyncio
async def test_session_allows_one_command(monkeypatch):
    writer = FakeWriter()
    reader = asyncio.StreamReader()
    reader.feed_data(b"+ok\r\n")

    async def fake_open_connection(host, port):
        return reader, writer

    monkeypatch.setattr(asyncio, "open_connection", fake_open_connection)
    async with await RecoOutlet("192.0.2.1", timeout_secs=1.0).connect() as session:
        assert isinstance(session, RecoOutletSession)
        await session.transact("AT+YZOUT\r\n")
        with pytest.raises(RecoError, match="one command"):
            await session.transact("AT+YZOUT\r\n")
    assert session.writer is None


@pytest.mark.asyncio
async def test_session_context_returns_itself(monkeypatch):
    writer = FakeWriter()
    reader = asyncio.StreamReader()

    async def fake_open_connection(host, port):
        return reader, writer

    monkeypatch.setattr(asyncio, "open_connection", fake_open_connection)
    session = await RecoOutlet("192.0.2.1", timeout_secs=1.0).connect()
    async with session as entered:
        assert entered is session
    assert writer.closed


@pytest.mark.asyncio
async def test_close_does_not_wait_forever_for_peer(monkeypatch):
    writer = FakeWriter(hang_on_close=True)
    reader = asyncio.StreamReader()
    reader.feed_data(b"+ok\r\n")

    async def fake_open_connection(host, port):
        return reader, writer

    monkeypatch.setattr(asyncio, "open_connection", fake_open_connection)
    start = time.monotonic()
    await asyncio.wait_for(RecoOutlet("192.0.2.1", timeout_secs=0.2).power_on(), 5.0)
    assert time.monotonic() - start < 2.0
    assert writer.closed
