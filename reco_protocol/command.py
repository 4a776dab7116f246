#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Builders for the AT command strings sent to an outlet over the TCP control channel.

All commands are ASCII text terminated with CRLF:

    AT+YZSWITCH=<slot>,<ON|OFF>,<timestamp>\\r\\n
    AT+YZDELAY=<slot>,<ON|OFF>,<delay_minutes>,<timestamp>\\r\\n
    AT+YZOUT\\r\\n

<timestamp> is the local time at build time, formatted as YYYYMMDDHHmm. Slot and
delay values are passed through verbatim; no range checking is performed.
"""

from __future__ import annotations

import datetime
from enum import Enum

from .internal_types import *
from .constants import DEFAULT_SLOT
from .util import get_date_string

class Flag(Enum):
    """The commanded power state of an outlet."""
    ON = 'ON'
    OFF = 'OFF'

def build_switch_command(flag: Flag, slot: int=DEFAULT_SLOT, now: Optional[datetime.datetime]=None) -> str:
    """Builds a command that switches an outlet slot on or off immediately."""
    return f"AT+YZSWITCH={slot},{flag.value},{get_date_string(now)}\r\n"

def build_delay_command(
        flag: Flag,
        slot: int=DEFAULT_SLOT,
        delay_minutes: int=0,
        now: Optional[datetime.datetime]=None
      ) -> str:
    """Builds a command that switches an outlet slot on or off after delay_minutes minutes."""
    return f"AT+YZDELAY={slot},{flag.value},{delay_minutes},{get_date_string(now)}\r\n"

def build_power_command(
        flag: Flag,
        delay_minutes: int=0,
        slot: int=DEFAULT_SLOT,
        now: Optional[datetime.datetime]=None
      ) -> str:
    """Builds a delay command if delay_minutes > 0, otherwise an immediate switch command."""
    if delay_minutes > 0:
        return build_delay_command(flag, slot, delay_minutes, now=now)
    return build_switch_command(flag, slot, now=now)
