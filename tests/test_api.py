"""Tests for the module-level convenience coroutines."""

import re

import pytest

import reco_protocol
from reco_protocol import RecoOutlet, RecoDiscoveryScanner, PowerInfo


@pytest.fixture
def sent_commands(monkeypatch):
    sent = []

    async def fake_send(self, command):
        sent.append((self.host, self.port, command))
        if command == "AT+YZOUT\r\n":
            return "123,2300,5000,1100,0,5000,0"
        return ""

    monkeypatch.setattr(RecoOutlet, "send", fake_send)
    return sent


@pytest.mark.asyncio
async def test_power_on_with_delay(sent_commands):
    await reco_protocol.power_on("192.168.1.10", 5, 1)
    host, port, command = sent_commands[0]
    assert (host, port) == ("192.168.1.10", 8899)
    assert re.fullmatch(r"AT\+YZDELAY=1,ON,5,\d{12}\r\n", command)


@pytest.mark.asyncio
async def test_power_off_defaults(sent_commands):
    await reco_protocol.power_off()
    host, _, command = sent_commands[0]
    assert host == "192.168.1.10"
    assert re.fullmatch(r"AT\+YZSWITCH=1,OFF,\d{12}\r\n", command)


@pytest.mark.asyncio
async def test_read_power(sent_commands):
    info = await reco_protocol.read_power("10.0.0.9")
    assert isinstance(info, PowerInfo)
    assert info.active_energy == 5000
    assert sent_commands == [("10.0.0.9", 8899, "AT+YZOUT\r\n")]


@pytest.mark.asyncio
async def test_discover_forwards_parameters(monkeypatch):
    seen = []

    async def fake_scan(self):
        seen.append((self.target_host, self.port, self.response_wait_time, self.max_results, self.bind_port))
        return []

    monkeypatch.setattr(RecoDiscoveryScanner, "scan", fake_scan)
    assert await reco_protocol.discover() == []
    assert await reco_protocol.discover("10.0.0.255", response_wait_time=1.5, max_results=3) == []
    assert seen == [
        ("192.168.1.255", 48899, 0.5, 65535, 48899),
        ("10.0.0.255", 48899, 1.5, 3, 48899),
    ]
