#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Validation of control channel response frames, and decoding of telemetry payloads.

A response frame is ASCII text. If it contains "ok" (in any case) the command
succeeded, and the payload is whatever follows the marker and its single delimiter
character; e.g., "+ok=123,2300,5000,1100,0,5000,0\\r\\n" carries the payload
"123,2300,5000,1100,0,5000,0". Any other text is a failure report from the outlet.
"""

from __future__ import annotations

import re

from .internal_types import *
from .pkg_logging import logger
from .exceptions import RecoProtocolError, MalformedResponseError

_success_marker_re = re.compile(r'ok', re.IGNORECASE)

POWER_INFO_FIELD_COUNT = 7
"""The number of comma-separated fields in a telemetry payload."""

def validate_response(raw_response: bytes) -> str:
    """Validates a raw response frame and returns its payload.

    Raises RecoProtocolError carrying the trimmed response text if the frame does not
    contain the success marker.
    """
    text = raw_response.decode('utf-8', errors='replace').strip()
    m = _success_marker_re.search(text)
    if m is None:
        raise RecoProtocolError(f"Outlet reported failure: {text!r}", raw_response=text)
    # skip the marker and the one delimiter character that follows it ('=' in "+ok=")
    payload = text[m.end() + 1:]
    logger.debug(f"Validated response {text!r}, payload={payload!r}")
    return payload

class PowerInfo:
    """A single telemetry snapshot read from an outlet.

    All values are integers in the fixed-point units used by the outlet.
    """

    current: int
    """Current, in units of 0.01 A"""

    voltage: int
    """Voltage, in units of 0.01 V"""

    frequency: int
    """Line frequency, in units of 0.01 Hz"""

    active_power: int
    """Active power, in units of 0.1 W"""

    reactive_power: int
    """Reactive power"""

    active_energy: int
    """Accumulated active energy, in units of 1 Wh"""

    reactive_energy: int
    """Accumulated reactive energy"""

    def __init__(
            self,
            current: int,
            voltage: int,
            frequency: int,
            active_power: int,
            reactive_power: int,
            active_energy: int,
            reactive_energy: int,
          ) -> None:
        self.current = current
        self.voltage = voltage
        self.frequency = frequency
        self.active_power = active_power
        self.reactive_power = reactive_power
        self.active_energy = active_energy
        self.reactive_energy = reactive_energy

    @classmethod
    def from_payload(cls, payload: str) -> PowerInfo:
        """Parses a telemetry payload of the form "I,U,F,P,PQ,E,EQ".

        Fields beyond the seventh are ignored. Raises MalformedResponseError if there are
        fewer than seven fields or any of them is not an integer.
        """
        parts = payload.split(',')
        if len(parts) < POWER_INFO_FIELD_COUNT:
            raise MalformedResponseError(
                f"Malformed telemetry frame: expected {POWER_INFO_FIELD_COUNT} fields, got {len(parts)}: {payload!r}",
                raw_response=payload
              )
        try:
            values = [int(part) for part in parts[:POWER_INFO_FIELD_COUNT]]
        except ValueError as e:
            raise MalformedResponseError(f"Malformed telemetry frame: {payload!r}", raw_response=payload) from e
        return cls(*values)

    @property
    def amps(self) -> float:
        return self.current / 100.0

    @property
    def volts(self) -> float:
        return self.voltage / 100.0

    @property
    def hertz(self) -> float:
        return self.frequency / 100.0

    @property
    def watts(self) -> float:
        return self.active_power / 10.0

    @property
    def kilowatt_hours(self) -> float:
        return self.active_energy / 1000.0

    def to_jsonable(self) -> JsonableDict:
        return {
            "current": self.current,
            "voltage": self.voltage,
            "frequency": self.frequency,
            "active_power": self.active_power,
            "reactive_power": self.reactive_power,
            "active_energy": self.active_energy,
            "reactive_energy": self.reactive_energy,
        }

    def __str__(self) -> str:
        return f"PowerInfo(I={self.current}, U={self.voltage}, F={self.frequency}, P={self.active_power}, PQ={self.reactive_power}, E={self.active_energy}, EQ={self.reactive_energy})"

    def __repr__(self) -> str:
        return str(self)
