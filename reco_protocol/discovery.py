#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
RecoDiscoveryScanner -- A discovery client for Reco smart outlets that can:

  1. Send the "YZ-RECOSCAN" probe to a broadcast or unicast UDP address (typically x.x.x.255:48899)
  2. Receive and decode "ip,mac,sn,res,status" replies from outlets, ignoring replies that
     originate from the local host and replies that cannot be decoded
  3. Collect and return the replies received within a bounded time window, or until
     a maximum number of devices has been collected
"""

from __future__ import annotations

import asyncio
from asyncio import Future
import socket

from .internal_types import *
from .pkg_logging import logger
from .constants import (
    DEFAULT_BROADCAST_ADDRESS,
    RECO_DISCOVERY_PORT,
    DISCOVERY_PROBE,
    DEFAULT_DISCOVERY_WAIT_TIME,
    DEFAULT_MAX_RESULTS,
  )
from .exceptions import MalformedResponseError, DiscoverySendError, RecoTransportError
from .device_info import DeviceInfo
from .util import get_local_ip_addresses, is_local_address

class RecoDiscoveryScan(asyncio.DatagramProtocol):
    """The state of a single discovery scan, bound to one datagram transport.

    The scan ends when the transport is closed, either by the wait-time timer or because
    max_results devices have been collected. final_result is resolved from connection_lost,
    with the collected devices or with a DiscoverySendError if the probe could not be sent.
    """

    target_addr: HostAndPort
    """The address the probe is sent to"""

    response_wait_time: float
    """The amount of time (in seconds) to collect replies"""

    max_results: int
    """The number of collected devices that ends the scan early"""

    local_addresses: List[str]
    """The IP addresses of the local host. Replies from these addresses are ignored."""

    devices: List[DeviceInfo]
    """The devices collected so far, in order of arrival"""

    final_result: Future[List[DeviceInfo]]

    transport: Optional[asyncio.DatagramTransport] = None
    send_error: Optional[Exception] = None
    closing: bool = False
    _timer: Optional[asyncio.TimerHandle] = None

    def __init__(
            self,
            target_addr: HostAndPort,
            response_wait_time: float,
            max_results: int,
            local_addresses: Iterable[str],
            final_result: Future[List[DeviceInfo]],
          ) -> None:
        self.target_addr = target_addr
        self.response_wait_time = response_wait_time
        self.max_results = max_results
        self.local_addresses = list(local_addresses)
        self.final_result = final_result
        self.devices = []

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """Called when the datagram endpoint is ready. Sends the probe and starts the wait timer."""
        self.transport = transport # type: ignore[assignment]
        logger.debug(f"Sending discovery probe to {self.target_addr}")
        try:
            transport.sendto(DISCOVERY_PROBE, self.target_addr) # type: ignore[attr-defined]
        except (OSError, ValueError) as e:
            self.record_send_error(e)
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.response_wait_time, self.close)

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        """Called when a reply is received."""
        if self.closing:
            return
        if is_local_address(addr[0], self.local_addresses):
            logger.debug(f"Ignoring datagram from local address {addr}: {data!r}")
            return
        try:
            device = DeviceInfo.from_reply(data)
        except MalformedResponseError as e:
            logger.debug(f"Ignoring malformed discovery reply from {addr}: {e}")
            return
        logger.debug(f"Discovered {device} from {addr}")
        self.devices.append(device)
        if len(self.devices) >= self.max_results:
            logger.debug(f"Collected {len(self.devices)} devices; ending scan early")
            self.close()

    def error_received(self, exc: Exception) -> None:
        """Called when a send or receive operation raises an OSError.

        Errors on an unconnected datagram socket come from sending the probe, except for
        ConnectionResetError, which some platforms (e.g., Windows) report on receive when an
        ICMP port-unreachable arrives. Those are logged and the scan continues.
        """
        if isinstance(exc, ConnectionResetError):
            logger.info(f"Ignoring receive error during discovery scan of {self.target_addr}: {exc}")
            return
        self.record_send_error(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """Called exactly once, after the transport has been closed."""
        self.closing = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.transport = None
        if self.final_result.done():
            return
        if self.send_error is not None:
            err = DiscoverySendError(f"Unable to send discovery probe to {self.target_addr[0]}:{self.target_addr[1]}: {self.send_error}")
            err.__cause__ = self.send_error
            self.final_result.set_exception(err)
        elif exc is not None:
            err = RecoTransportError(f"Discovery socket closed with error: {exc}")
            err.__cause__ = exc
            self.final_result.set_exception(err)
        else:
            logger.info(f"Discovery scan of {self.target_addr} found {len(self.devices)} devices")
            self.final_result.set_result(list(self.devices))

    def record_send_error(self, exc: Exception) -> None:
        if self.send_error is None:
            logger.warning(f"Error sending discovery probe to {self.target_addr}: {exc}")
            self.send_error = exc

    def close(self) -> None:
        """Ends the scan. Safe to call any number of times."""
        if self.closing:
            return
        self.closing = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.transport is not None:
            self.transport.close()


class RecoDiscoveryScanner:
    """
    A discovery client for Reco smart outlets.

    Usage:
        scanner = RecoDiscoveryScanner("192.168.1.255")
        devices = await scanner.scan()
    """

    target_host: str
    """The broadcast or unicast address the probe is sent to."""

    port: int
    """The UDP port the probe is sent to."""

    response_wait_time: float
    """The amount of time (in seconds) to collect replies."""

    max_results: int
    """The maximum number of devices to collect before ending the scan early."""

    bind_address: str
    """The local IP address to bind to. '' binds to all local addresses."""

    bind_port: int
    """The local UDP port to bind to. Outlets send replies to RECO_DISCOVERY_PORT, so
       other values are only useful for testing."""

    local_addresses: Optional[List[str]] = None
    """The local IP addresses whose replies are ignored. If None, the local interface
       addresses are enumerated at the start of each scan."""

    def __init__(
            self,
            target_host: str=DEFAULT_BROADCAST_ADDRESS,
            response_wait_time: float=DEFAULT_DISCOVERY_WAIT_TIME,
            max_results: int=DEFAULT_MAX_RESULTS,
            port: int=RECO_DISCOVERY_PORT,
            bind_address: str='',
            bind_port: Optional[int]=None,
            local_addresses: Optional[Iterable[str]]=None,
          ) -> None:
        if max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {max_results}")
        self.target_host = target_host
        self.response_wait_time = response_wait_time
        self.max_results = max_results
        self.port = port
        self.bind_address = bind_address
        self.bind_port = RECO_DISCOVERY_PORT if bind_port is None else bind_port
        self.local_addresses = None if local_addresses is None else list(local_addresses)

    def create_socket(self) -> socket.socket:
        """Creates the broadcast-capable datagram socket used for one scan, bound to (bind_address, bind_port)."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.bind((self.bind_address, self.bind_port))
        except OSError as e:
            sock.close()
            raise RecoTransportError(f"Unable to bind discovery socket to {self.bind_address}:{self.bind_port}: {e}") from e
        return sock

    async def scan(self) -> List[DeviceInfo]:
        """Sends a probe and returns the devices that replied within response_wait_time,
           in order of arrival. No deduplication is performed.

           Raises DiscoverySendError after the wait time has elapsed if the probe could not be sent.
        """
        loop = asyncio.get_running_loop()
        local_addresses = self.local_addresses
        if local_addresses is None:
            local_addresses = get_local_ip_addresses()
        logger.debug(f"Local addresses excluded from discovery: {local_addresses}")
        final_result: Future[List[DeviceInfo]] = loop.create_future()
        sock = self.create_socket()
        try:
            _, protocol = await loop.create_datagram_endpoint(
                lambda: RecoDiscoveryScan(
                    (self.target_host, self.port),
                    self.response_wait_time,
                    self.max_results,
                    local_addresses,
                    final_result
                  ),
                sock=sock
              )
        except BaseException:
            sock.close()
            raise
        assert isinstance(protocol, RecoDiscoveryScan)
        try:
            return await final_result
        finally:
            protocol.close()

    def __str__(self) -> str:
        return f"RecoDiscoveryScanner(target={self.target_host}:{self.port}, bind={self.bind_address}:{self.bind_port})"

    def __repr__(self) -> str:
        return str(self)
