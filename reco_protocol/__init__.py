# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package reco_protocol implements the LAN control and discovery protocols of Reco smart power outlets.

Outlets accept ASCII AT commands over TCP port 8899, one command per connection, and
answer each with a single response frame. Commands switch an outlet slot on or off,
immediately or after a delay, or request a telemetry snapshot.

Outlets on the local network segment can be discovered by sending the UDP probe
"YZ-RECOSCAN" to port 48899 (usually as a broadcast); each outlet replies to port
48899 with a comma-separated "ip,mac,sn,res,status" record.
"""

from .version import __version__

from .internal_types import Jsonable, JsonableDict, HostAndPort

from .exceptions import (
    RecoError,
    RecoConnectionError,
    RecoTransportError,
    RecoTimeoutError,
    RecoProtocolError,
    MalformedResponseError,
    DiscoverySendError,
  )

from .command import Flag, build_switch_command, build_delay_command, build_power_command
from .response import validate_response, PowerInfo
from .device_info import DeviceInfo
from .session import RecoOutlet, RecoOutletSession
from .discovery import RecoDiscoveryScanner, RecoDiscoveryScan
from .api import power_on, power_off, read_power, discover
from .constants import (
    DEFAULT_HOST,
    DEFAULT_SLOT,
    DEFAULT_BROADCAST_ADDRESS,
    RECO_CONTROL_PORT,
    RECO_DISCOVERY_PORT,
    READ_POWER_COMMAND,
    DEFAULT_TIMEOUT,
    DEFAULT_DISCOVERY_WAIT_TIME,
    DEFAULT_MAX_RESULTS,
  )

__all__ = [
    '__version__',
    'Jsonable', 'JsonableDict', 'HostAndPort',
    'RecoError', 'RecoConnectionError', 'RecoTransportError', 'RecoTimeoutError',
    'RecoProtocolError', 'MalformedResponseError', 'DiscoverySendError',
    'Flag', 'build_switch_command', 'build_delay_command', 'build_power_command',
    'validate_response', 'PowerInfo',
    'DeviceInfo',
    'RecoOutlet', 'RecoOutletSession',
    'RecoDiscoveryScanner', 'RecoDiscoveryScan',
    'power_on', 'power_off', 'read_power', 'discover',
    'DEFAULT_HOST', 'DEFAULT_SLOT', 'DEFAULT_BROADCAST_ADDRESS', 'RECO_CONTROL_PORT', 'RECO_DISCOVERY_PORT',
    'READ_POWER_COMMAND', 'DEFAULT_TIMEOUT', 'DEFAULT_DISCOVERY_WAIT_TIME', 'DEFAULT_MAX_RESULTS',
]
