# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by this package"""

DEFAULT_HOST = "192.168.1.10"
"""The factory-default IP address of an outlet; used when no host is given."""

DEFAULT_BROADCAST_ADDRESS = "192.168.1.255"
"""The default target address for discovery probes."""

RECO_CONTROL_PORT = 8899
"""The TCP port on which outlets accept AT commands."""

RECO_DISCOVERY_PORT = 48899
"""The UDP port used for discovery. Outlets reply to this fixed port, so the scanner
   must be bound to it as well."""

DISCOVERY_PROBE = b"YZ-RECOSCAN"
"""The discovery probe datagram payload."""

READ_POWER_COMMAND = "AT+YZOUT\r\n"
"""The command that requests a telemetry snapshot. It takes no parameters."""

DEFAULT_SLOT = 1
"""The default outlet slot number on multi-outlet devices."""

DEFAULT_TIMEOUT = 3.0
"""The default time (in seconds) to wait for a TCP connection or a response frame."""

DEFAULT_DISCOVERY_WAIT_TIME = 0.5
"""The default amount of time (in seconds) to collect discovery replies."""

DEFAULT_MAX_RESULTS = 65535
"""The default maximum number of devices collected by one discovery scan."""

MAX_RESPONSE_SIZE = 4096
"""The maximum number of bytes accepted for a single response frame."""
