#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from typing import Optional

class RecoError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class RecoConnectionError(RecoError):
  """A TCP connection to an outlet could not be established."""
  pass

class RecoTransportError(RecoError):
  """An I/O error occurred on an established connection or socket."""
  pass

class RecoTimeoutError(RecoError):
  """An outlet did not complete a connect or respond within the allowed time."""
  pass

class RecoProtocolError(RecoError):
  """An outlet responded, but the response frame does not carry the success marker."""

  raw_response: str
  """The trimmed response text sent by the outlet."""

  def __init__(self, msg: str, raw_response: Optional[str]=None):
    super().__init__(msg)
    self.raw_response = '' if raw_response is None else raw_response

class MalformedResponseError(RecoProtocolError):
  """A response or discovery reply does not have the expected shape."""
  pass

class DiscoverySendError(RecoError):
  """The discovery probe could not be sent."""
  pass
