#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from typing import (
    Dict,
    List,
    Optional,
    Union,
    Any,
    Tuple,
    Set,
    Callable,
    Awaitable,
    Iterable,
    Sequence,
    Mapping,
    TypeVar,
)

from typing_extensions import Self

from types import TracebackType

Jsonable = Union[Dict[str, 'Jsonable'], List['Jsonable'], str, int, float, bool, None]
"""A type hint for a simple JSON-serializable value; i.e., str, int, float, bool, None, Dict[str, Jsonable], List[Jsonable]"""

JsonableDict = Dict[str, Jsonable]
"""A type hint for a simple JSON-serializable dict; i.e., Dict[str, Jsonable]"""

HostAndPort = Tuple[str, int]
"""A type hint for a (host, port) socket address tuple"""

__all__ = [
    'Dict', 'List', 'Optional', 'Union', 'Any', 'Tuple', 'Set',
    'Callable', 'Awaitable', 'Iterable', 'Sequence', 'Mapping', 'TypeVar',
    'Self', 'TracebackType',
    'Jsonable', 'JsonableDict', 'HostAndPort',
]
