#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
RecoOutlet -- A client for the TCP control channel of a Reco smart outlet that can:

  1. Switch an outlet slot on or off, immediately or after a delay
  2. Read a telemetry snapshot (current, voltage, frequency, power, energy)

  The outlet accepts exactly one command per TCP connection and answers with exactly
  one response frame, so every operation opens a RecoOutletSession, performs a single
  transaction, and closes the connection again.
"""

from __future__ import annotations

import asyncio

from .internal_types import *
from .pkg_logging import logger
from .constants import (
    DEFAULT_HOST,
    RECO_CONTROL_PORT,
    DEFAULT_SLOT,
    DEFAULT_TIMEOUT,
    MAX_RESPONSE_SIZE,
    READ_POWER_COMMAND,
  )
from .exceptions import (
    RecoError,
    RecoConnectionError,
    RecoTransportError,
    RecoTimeoutError,
  )
from .command import Flag, build_power_command
from .response import validate_response, PowerInfo

class RecoOutletSession:
    """A single TCP connection to an outlet, over which one command is sent and one response is read.

    Usage:
        async with await outlet.connect() as session:
            payload = await session.transact("AT+YZOUT\\r\\n")
    """
    outlet: RecoOutlet
    reader: Optional[asyncio.StreamReader] = None
    writer: Optional[asyncio.StreamWriter] = None
    transacted: bool = False

    def __init__(self, outlet: RecoOutlet):
        self.outlet = outlet

    async def _async_dispose(self) -> None:
        try:
            if self.reader is not None:
                self.reader.feed_eof()
        except Exception as e:
            logger.exception("Exception while closing reader")
        try:
            if self.writer is not None:
                self.writer.close()
                await asyncio.wait_for(self.writer.wait_closed(), self.timeout_secs)
        except Exception as e:
            logger.debug(f"Exception while closing writer on {self}: {e}")
        self.reader = None
        self.writer = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
            self,
            exc_type: Optional[type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType]
          ) -> Optional[bool]:
        if exc_val is None:
            logger.debug(f"Closing {self}")
        else:
            logger.debug(f"Closing {self} after exception: {exc_val!r}")

        await self._async_dispose()

        return False

    @property
    def host(self) -> str:
        return self.outlet.host

    @property
    def port(self) -> int:
        return self.outlet.port

    @property
    def timeout_secs(self) -> Optional[float]:
        return self.outlet.timeout_secs

    @classmethod
    async def create(cls, outlet: RecoOutlet) -> RecoOutletSession:
        self = cls(outlet)
        try:
            await self.connect()
        except BaseException as e:
            logger.debug(f"Unable to connect to {outlet}: {e!r}")
            await self._async_dispose()
            raise
        return self

    async def connect(self) -> None:
        assert self.reader is None and self.writer is None
        logger.debug(f"Connecting to: {self.outlet}")
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), self.timeout_secs)
        except asyncio.TimeoutError as e:
            raise RecoTimeoutError(f"Timed out connecting to {self.host}:{self.port}") from e
        except OSError as e:
            raise RecoConnectionError(f"Unable to connect to {self.host}:{self.port}: {e}") from e
        logger.info(f"{self} connected")

    async def write_exactly(self, data: bytes | bytearray | memoryview) -> None:
        assert self.writer is not None

        logger.debug(f"Writing {len(data)} bytes to {self}: {bytes(data)!r}")
        try:
            self.writer.write(data)
            await asyncio.wait_for(self.writer.drain(), self.timeout_secs)
        except asyncio.TimeoutError as e:
            raise RecoTimeoutError(f"Timed out writing command to {self.host}:{self.port}") from e
        except OSError as e:
            raise RecoTransportError(f"Unable to write command to {self.host}:{self.port}: {e}") from e

    async def read_response_frame(self) -> bytes:
        """Waits for a single inbound data event and returns its bytes, with timeout.

        The protocol has no framing; whatever arrives in the first read is the whole frame.
        """
        assert self.reader is not None

        try:
            data = await asyncio.wait_for(self.reader.read(MAX_RESPONSE_SIZE), self.timeout_secs)
        except asyncio.TimeoutError as e:
            raise RecoTimeoutError(f"No response from {self.host}:{self.port} within {self.timeout_secs} seconds") from e
        except OSError as e:
            raise RecoTransportError(f"Unable to read response from {self.host}:{self.port}: {e}") from e
        logger.debug(f"Read {len(data)} bytes from {self}: {data!r}")
        if len(data) == 0:
            raise RecoTransportError(f"Connection closed by {self.host}:{self.port} without a response")
        return data

    async def transact(self, command: str) -> str:
        """Sends a command and returns the validated payload of the response frame"""
        if self.transacted:
            raise RecoError(f"Only one command may be sent per connection: {self}")
        self.transacted = True
        await self.write_exactly(command.encode('ascii'))
        raw_response = await self.read_response_frame()
        return validate_response(raw_response)

    def __str__(self) -> str:
        return f"RecoOutletSession(host={self.host}, port={self.port})"

    def __repr__(self) -> str:
       return str(self)

    async def close(self) -> None:
       await self._async_dispose()


class RecoOutlet:
    """The address and timeout used to reach a single outlet's control channel."""
    host: str
    port: int
    timeout_secs: float

    def __init__(
            self,
            host: str = DEFAULT_HOST,
            port: int = RECO_CONTROL_PORT,
            timeout_secs: float = DEFAULT_TIMEOUT
          ):
        self.host = host
        self.port = port
        self.timeout_secs = timeout_secs

    async def connect(self) -> RecoOutletSession:
        return await RecoOutletSession.create(self)

    async def send(self, command: str) -> str:
        """Opens a connection, sends one command, and returns the validated response payload.
           The connection is closed before returning, whether or not the command succeeded."""
        async with await self.connect() as session:
            return await session.transact(command)

    async def set_power(self, flag: Flag, delay_minutes: int=0, slot: int=DEFAULT_SLOT) -> None:
        """Switches an outlet slot on or off, immediately or after delay_minutes minutes.
           The success payload of a switch command carries no information and is discarded."""
        command = build_power_command(flag, delay_minutes=delay_minutes, slot=slot)
        await self.send(command)

    async def power_on(self, delay_minutes: int=0, slot: int=DEFAULT_SLOT) -> None:
        await self.set_power(Flag.ON, delay_minutes=delay_minutes, slot=slot)

    async def power_off(self, delay_minutes: int=0, slot: int=DEFAULT_SLOT) -> None:
        await self.set_power(Flag.OFF, delay_minutes=delay_minutes, slot=slot)

    async def read_power(self) -> PowerInfo:
        payload = await self.send(READ_POWER_COMMAND)
        result = PowerInfo.from_payload(payload)
        logger.debug(f"Read {result} from {self}")
        return result

    def __str__(self):
        return f"RecoOutlet(host={self.host}, port={self.port}, timeout_secs={self.timeout_secs})"

    def __repr__(self):
        return str(self)
