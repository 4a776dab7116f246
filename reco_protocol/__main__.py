#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import os
import sys
import argparse
import json
import asyncio
import logging

from reco_protocol.internal_types import *

from reco_protocol import (
    __version__ as pkg_version,
    RecoOutlet,
    RecoDiscoveryScanner,
    DEFAULT_HOST,
    DEFAULT_SLOT,
    DEFAULT_BROADCAST_ADDRESS,
    DEFAULT_TIMEOUT,
    DEFAULT_DISCOVERY_WAIT_TIME,
    DEFAULT_MAX_RESULTS,
    RECO_CONTROL_PORT,
  )

class CmdExitError(RuntimeError):
    exit_code: int

    def __init__(self, exit_code: int, msg: Optional[str]=None):
        if msg is None:
            msg = f"Command exited with return code {exit_code}"
        super().__init__(msg)
        self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
    pass

class NoExitArgumentParser(argparse.ArgumentParser):
    def exit(self, status=0, message=None):
        if message:
            self._print_message(message, sys.stderr)
        raise ArgparseExitError(status, message)

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _parser: argparse.ArgumentParser
    _args: argparse.Namespace
    _provide_traceback: bool = True

    def __init__(self, argv: Optional[Sequence[str]]=None):
        self._argv = argv

    async def cmd_bare(self) -> int:
        print("A command is required", file=sys.stderr)
        return 1

    def _get_outlet(self) -> RecoOutlet:
        host: Optional[str] = self._args.host
        if host is None:
            host = os.getenv("RECO_HOST")
            if host is None or host == '':
                host = DEFAULT_HOST
        return RecoOutlet(host, port=self._args.port, timeout_secs=self._args.timeout)

    async def cmd_on(self) -> int:
        outlet = self._get_outlet()
        await outlet.power_on(delay_minutes=self._args.delay, slot=self._args.slot)
        return 0

    async def cmd_off(self) -> int:
        outlet = self._get_outlet()
        await outlet.power_off(delay_minutes=self._args.delay, slot=self._args.slot)
        return 0

    async def cmd_info(self) -> int:
        outlet = self._get_outlet()
        power_info = await outlet.read_power()
        print(json.dumps(power_info.to_jsonable(), indent=2, sort_keys=True))
        return 0

    async def cmd_discover(self) -> int:
        target: Optional[str] = self._args.target
        if target is None:
            target = os.getenv("RECO_DISCOVERY_HOST")
            if target is None or target == '':
                target = DEFAULT_BROADCAST_ADDRESS
        scanner = RecoDiscoveryScanner(
            target,
            response_wait_time=self._args.wait_time,
            max_results=self._args.max_results,
          )
        devices = await scanner.scan()
        for device in devices:
            print(json.dumps(device.to_jsonable(), indent=2, sort_keys=True))
        sys.stdout.flush()
        return 0

    async def cmd_version(self) -> int:
        print(pkg_version)
        return 0

    async def arun(self) -> int:
        """Run the reco command-line tool with provided arguments

        Args:
            argv (Optional[Sequence[str]], optional):
                A list of commandline arguments (NOT including the program as argv[0]!),
                or None to use sys.argv[1:]. Defaults to None.

        Returns:
            int: The exit code that would be returned if this were run as a standalone command.
        """
        parser = NoExitArgumentParser(description="Control and discover Reco smart power outlets.")


        # ======================= Main command

        self._parser = parser
        parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                            help='Display detailed exception information')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='''The logging level to use. Default: warning''')
        parser.add_argument("-H", "--host", default=None,
                            help=f'''The outlet hostname or IP address. Default: Use env var RECO_HOST, or {DEFAULT_HOST}''')
        parser.add_argument("--port", default=RECO_CONTROL_PORT, type=int,
                            help=f'''The outlet control port. Default: {RECO_CONTROL_PORT}''')
        parser.add_argument("-t", "--timeout", default=DEFAULT_TIMEOUT, type=float,
                            help=f'''Timeout for control operations, in seconds. Default: {DEFAULT_TIMEOUT}''')
        parser.set_defaults(func=self.cmd_bare)

        subparsers = parser.add_subparsers(
                            title='Commands',
                            description='Valid commands',
                            help='Additional help available with "<command-name> -h"')


        # ======================= on

        parser_on = subparsers.add_parser('on', description="Switch an outlet slot on")
        parser_on.add_argument('-d', '--delay', type=int, default=0,
                            help='''Delay before switching, in minutes. Default: 0 (immediately)''')
        parser_on.add_argument('-s', '--slot', type=int, default=DEFAULT_SLOT,
                            help=f'''The outlet slot number. Default: {DEFAULT_SLOT}''')
        parser_on.set_defaults(func=self.cmd_on)

        # ======================= off

        parser_off = subparsers.add_parser('off', description="Switch an outlet slot off")
        parser_off.add_argument('-d', '--delay', type=int, default=0,
                            help='''Delay before switching, in minutes. Default: 0 (immediately)''')
        parser_off.add_argument('-s', '--slot', type=int, default=DEFAULT_SLOT,
                            help=f'''The outlet slot number. Default: {DEFAULT_SLOT}''')
        parser_off.set_defaults(func=self.cmd_off)

        # ======================= info

        parser_info = subparsers.add_parser('info', description="Display an outlet's power telemetry")
        parser_info.set_defaults(func=self.cmd_info)

        # ======================= discover

        parser_discover = subparsers.add_parser('discover', description="Discover outlets on the local network")
        parser_discover.add_argument('--target', default=None,
                            help=f'''The broadcast or unicast address to probe. Default: Use env var RECO_DISCOVERY_HOST, or {DEFAULT_BROADCAST_ADDRESS}''')
        parser_discover.add_argument('--wait-time', type=float, default=DEFAULT_DISCOVERY_WAIT_TIME,
                            help=f'''The amount of time to wait for replies, in seconds. Default: {DEFAULT_DISCOVERY_WAIT_TIME}''')
        parser_discover.add_argument('--max-results', type=int, default=DEFAULT_MAX_RESULTS,
                            help=f'''The maximum number of devices to return. Default: {DEFAULT_MAX_RESULTS}''')
        parser_discover.set_defaults(func=self.cmd_discover)

        # ======================= version

        parser_version = subparsers.add_parser('version',
                                description='''Display version information.''')
        parser_version.set_defaults(func=self.cmd_version)

        # =========================================================

        try:
            args = parser.parse_args(self._argv)
        except ArgparseExitError as ex:
            return ex.exit_code
        traceback: bool = args.traceback
        self._provide_traceback = traceback

        try:
            logging.basicConfig(
                level=logging.getLevelName(args.log_level.upper()),
            )
            self._args = args
            func: Callable[[], Awaitable[int]] = args.func
            logging.debug(f"Running command {func.__name__}, tb = {traceback}")
            rc = await func()
            logging.debug(f"Command {func.__name__} returned {rc}")
        except Exception as ex:
            if isinstance(ex, CmdExitError):
                rc = ex.exit_code
            else:
                rc = 1
            if rc != 0:
                if traceback:
                    raise
            print(f"reco: error: {ex}", file=sys.stderr)
        except BaseException as ex:
            print(f"reco: Unhandled exception: {ex}", file=sys.stderr)
            raise

        return rc

    def run(self) -> int:
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            rc = loop.run_until_complete(self.arun())
        finally:
            loop.close()
        return rc

def run(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = CommandHandler(argv).run()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

async def arun(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = await CommandHandler(argv).arun()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
    sys.exit(run())
