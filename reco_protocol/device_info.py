#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Abstraction of an outlet discovered by a discovery scan.
"""

from __future__ import annotations

from .internal_types import *
from .exceptions import MalformedResponseError

DEVICE_INFO_FIELD_COUNT = 5
"""The minimum number of comma-separated fields in a discovery reply."""

class DeviceInfo:
    """A discovered outlet, decoded from a discovery reply of the form
       "ip,mac,sn,res,status". Additional trailing fields are ignored."""

    ip: str
    """The IP address reported by the outlet"""

    mac: str
    """The MAC address reported by the outlet"""

    sn: str
    """The outlet serial number"""

    res: int
    """The state of the link between the outlet and its remote reset unit"""

    status: int
    """The power status of the outlet; 1 is ON and 0 is OFF"""

    def __init__(self, ip: str, mac: str, sn: str, res: int, status: int) -> None:
        self.ip = ip
        self.mac = mac
        self.sn = sn
        self.res = res
        self.status = status

    @classmethod
    def from_reply(cls, data: bytes) -> DeviceInfo:
        """Decodes a raw discovery reply datagram.

        Raises MalformedResponseError if the reply has fewer than five fields, or if
        res or status is not an integer.
        """
        text = data.decode('utf-8', errors='replace')
        parts = [ part.strip() for part in text.split(',') ]
        if len(parts) < DEVICE_INFO_FIELD_COUNT:
            raise MalformedResponseError(f"Discovery reply has {len(parts)} fields, expected at least {DEVICE_INFO_FIELD_COUNT}: {text!r}", raw_response=text)
        ip, mac, sn, res_str, status_str = parts[:DEVICE_INFO_FIELD_COUNT]
        try:
            res = int(res_str)
            status = int(status_str)
        except ValueError as e:
            raise MalformedResponseError(f"Discovery reply has non-integer res/status: {text!r}", raw_response=text) from e
        return cls(ip, mac, sn, res, status)

    @property
    def is_on(self) -> bool:
        return self.status == 1

    def to_jsonable(self) -> JsonableDict:
        return {
            "ip": self.ip,
            "mac": self.mac,
            "sn": self.sn,
            "res": self.res,
            "status": self.status,
        }

    def __str__(self) -> str:
        return f"DeviceInfo(ip={self.ip}, mac={self.mac}, sn={self.sn}, res={self.res}, status={self.status})"

    def __repr__(self) -> str:
        return str(self)
