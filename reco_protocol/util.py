#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Simple utility functions used by this package
"""

from __future__ import annotations

import netifaces
import socket
import datetime

from reco_protocol.internal_types import *

def get_date_string(now: Optional[datetime.datetime]=None) -> str:
    """Returns the 12-digit YYYYMMDDHHmm timestamp that outlets expect at the end of
       switch and delay commands.

    If now is None, the local wall-clock time is used. Month, day, hour and minute
    are always zero-padded to two digits.
    """
    if now is None:
        now = datetime.datetime.now()
    return f"{now.year:04d}{now.month:02d}{now.day:02d}{now.hour:02d}{now.minute:02d}"

def get_local_ip_addresses_and_interfaces(
        address_family: Union[socket.AddressFamily, int]=socket.AF_INET,
        include_loopback: bool=True
    ) -> List[Tuple[str, str]]:
    """Returns a list of Tuple[ip_address: str, interface_name: str] for every IP address
       assigned to a local network interface in the requested address family.
       Interfaces with several addresses contribute one entry per address.
    """
    result: List[Tuple[str, str]] = []
    assert int(address_family) in (int(socket.AF_INET), int(socket.AF_INET6))
    is_ipv6 = int(address_family) == int(socket.AF_INET6)
    netiface_family = netifaces.AF_INET6 if is_ipv6 else netifaces.AF_INET
    for ifname in netifaces.interfaces():
        ifinfo = netifaces.ifaddresses(ifname)
        if netiface_family in ifinfo:
            for addrinfo in ifinfo[netiface_family]:
                ip_str = addrinfo.get('addr')
                if not isinstance(ip_str, str):
                    continue
                # netifaces appends the scope to link-local IPv6 addresses (e.g., "fe80::1%eth0")
                ip_str = ip_str.split('%', 1)[0]
                if not include_loopback and (ip_str.startswith('127.') or ip_str == '::1'):
                    continue
                result.append((ip_str, ifname))
    return result

def get_local_ip_addresses(address_family: Union[socket.AddressFamily, int]=socket.AF_INET, include_loopback: bool=True) -> List[str]:
    """Returns a List[ip_address: str] for the IP addresses of the local host
       in a requested address family, across all interfaces."""
    return [ ip for ip, _ in get_local_ip_addresses_and_interfaces(address_family, include_loopback=include_loopback)]

def is_local_address(address: str, local_addresses: Iterable[str]) -> bool:
    """Returns True iff address is equal to ANY of the given local interface addresses.

    A match against any single address of a multi-address interface is sufficient.
    """
    return any(address == local_address for local_address in local_addresses)
