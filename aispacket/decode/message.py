"""
Payload decoding.

The semantic decoding of the sixbit payload is done
by ``pyais``; this module maps its failures onto the
two error kinds a packet reports and extracts the
position from messages that carry one.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import pyais as ais
from pyais.exceptions import (
    AISBaseException, InvalidNMEAMessageException,
    UnknownMessageException
)

from ..structs import AisPacketError, Position
from .sentence import Sentence

class MalformedPayload(AisPacketError):
    """The payload is not valid sixbit data."""
    pass

class SemanticDecodeError(AisPacketError):
    """The payload could not be decoded into a message."""
    pass

@runtime_checkable
class PositionCapable(Protocol):
    """
    Decoded messages carrying a position
    (types 1,2,3,4,9,11,18,19,21 and 27).
    """
    lat: float
    lon: float

def position_of(message) -> Optional[Position]:
    """
    Return the position reported by `message`, or None
    if the message has no position or it is unavailable.
    """
    if not isinstance(message, PositionCapable):
        return None
    lat, lon = message.lat, message.lon
    if lat is None or lon is None:
        return None
    # Unavailable positions are reported as lat 91, lon 181
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return Position(lat, lon)

class MessageDecoder:
    """
    Decode the payload of an assembled sentence.
    Raises :class:`MalformedPayload` or :class:`SemanticDecodeError`.
    """

    def __call__(self, sentence: Sentence) -> ais.ANY_MESSAGE:
        return self.decode(sentence)

    def decode(self, sentence: Sentence) -> ais.ANY_MESSAGE:
        try:
            return sentence.message.decode()
        except UnknownMessageException as err:
            raise SemanticDecodeError(str(err)) from err
        except (InvalidNMEAMessageException, ValueError) as err:
            raise MalformedPayload(str(err)) from err
        except (AISBaseException, IndexError, TypeError) as err:
            raise SemanticDecodeError(str(err)) from err
