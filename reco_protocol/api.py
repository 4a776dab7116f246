#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Module-level convenience coroutines that forward default addressing parameters to
RecoOutlet and RecoDiscoveryScanner.
"""

from __future__ import annotations

from .internal_types import *
from .constants import (
    DEFAULT_HOST,
    DEFAULT_BROADCAST_ADDRESS,
    DEFAULT_SLOT,
    DEFAULT_TIMEOUT,
    DEFAULT_DISCOVERY_WAIT_TIME,
    DEFAULT_MAX_RESULTS,
    RECO_CONTROL_PORT,
    RECO_DISCOVERY_PORT,
  )
from .session import RecoOutlet
from .response import PowerInfo
from .device_info import DeviceInfo
from .discovery import RecoDiscoveryScanner

async def power_on(
        host: str=DEFAULT_HOST,
        delay_minutes: int=0,
        slot: int=DEFAULT_SLOT,
        port: int=RECO_CONTROL_PORT,
        timeout_secs: float=DEFAULT_TIMEOUT,
      ) -> None:
    """Switches an outlet slot on, immediately or after delay_minutes minutes."""
    await RecoOutlet(host, port=port, timeout_secs=timeout_secs).power_on(delay_minutes=delay_minutes, slot=slot)

async def power_off(
        host: str=DEFAULT_HOST,
        delay_minutes: int=0,
        slot: int=DEFAULT_SLOT,
        port: int=RECO_CONTROL_PORT,
        timeout_secs: float=DEFAULT_TIMEOUT,
      ) -> None:
    """Switches an outlet slot off, immediately or after delay_minutes minutes."""
    await RecoOutlet(host, port=port, timeout_secs=timeout_secs).power_off(delay_minutes=delay_minutes, slot=slot)

async def read_power(
        host: str=DEFAULT_HOST,
        port: int=RECO_CONTROL_PORT,
        timeout_secs: float=DEFAULT_TIMEOUT,
      ) -> PowerInfo:
    """Reads the current telemetry snapshot of an outlet."""
    return await RecoOutlet(host, port=port, timeout_secs=timeout_secs).read_power()

async def discover(
        host: str=DEFAULT_BROADCAST_ADDRESS,
        response_wait_time: float=DEFAULT_DISCOVERY_WAIT_TIME,
        max_results: int=DEFAULT_MAX_RESULTS,
        port: int=RECO_DISCOVERY_PORT,
      ) -> List[DeviceInfo]:
    """Scans for outlets by sending a probe to host (an outlet address or a LAN broadcast address).

    Parameters:
        host:               The unicast or broadcast address to probe. Defaults to 192.168.1.255.
        response_wait_time: The amount of time (in seconds) to collect replies. Defaults to 0.5.
        max_results:        The number of devices after which the scan ends early. Defaults to 65535.
    """
    scanner = RecoDiscoveryScanner(host, response_wait_time=response_wait_time, max_results=max_results, port=port)
    return await scanner.scan()
