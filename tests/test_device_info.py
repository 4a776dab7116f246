"""Tests for discovery reply decoding."""

import pytest

from reco_protocol.device_info import DeviceInfo
from reco_protocol.exceptions import MalformedResponseError


def test_from_reply():
    device = DeviceInfo.from_reply(b"192.168.1.50,AA:BB:CC:DD:EE:FF,SN123,0,1")
    assert device.ip == "192.168.1.50"
    assert device.mac == "AA:BB:CC:DD:EE:FF"
    assert device.sn == "SN123"
    assert device.res == 0
    assert device.status == 1
    assert device.is_on


def test_trailing_fields_and_whitespace_are_ignored():
    device = DeviceInfo.from_reply(b"10.0.0.7,11:22:33:44:55:66,SN9,1,0,extra\r\n")
    assert device.ip == "10.0.0.7"
    assert device.res == 1
    assert device.status == 0
    assert not device.is_on


def test_too_few_fields():
    with pytest.raises(MalformedResponseError):
        DeviceInfo.from_reply(b"192.168.1.50,AA:BB:CC:DD:EE:FF,SN123,0")


def test_non_integer_status():
    with pytest.raises(MalformedResponseError):
        DeviceInfo.from_reply(b"192.168.1.50,AA:BB:CC:DD:EE:FF,SN123,0,on")


def test_to_jsonable():
    device = DeviceInfo.from_reply(b"192.168.1.50,AA:BB:CC:DD:EE:FF,SN123,0,1")
    assert device.to_jsonable() == {
        "ip": "192.168.1.50",
        "mac": "AA:BB:CC:DD:EE:FF",
        "sn": "SN123",
        "res": 0,
        "status": 1,
    }
