"""
AIS packet.
==========

An :class:`AisPacket` wraps the raw NMEA lines of a single AIS
message, including leading tag blocks and proprietary sentences.

Construction is cheap and never fails: nothing is parsed until
one of the derived views is requested. Each view is computed at
most once and cached on the packet:

    raw text -> sentence -> tags
                         -> decoded message
                         -> best timestamp

Packets are not thread safe. Apart from the best timestamp,
whose computation is idempotent, the first access to a derived
view must not race with another one. Warm packets up with
:meth:`AisPacket.materialize` before sharing them between threads.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, List, Optional

from .logger import logger
from .structs import (
    Cell, PositionTime, EPOCH_MILLIS,
    UNSET, NO_TIMESTAMP, to_millis
)
from .decode import (
    DEFAULT_CODEC, Codec, Sentence, SentenceError,
    PacketTags, MalformedPayload, SemanticDecodeError,
    position_of
)

_ENCODING = "ascii"
_LINE_SEPARATOR = re.compile(r"\r?\n")
_DECODE_ERRORS = (MalformedPayload, SemanticDecodeError)

class AisPacket:
    """
    Lazily decoded AIS packet.

    Parameters
    ----------
    string_message : str
        The raw lines of the packet.
    sentence : Sentence, optional
        An already assembled sentence for the raw lines.
    codec : Codec
        Assembler, tag extractor and decoder to use.

    Raises
    ------
    TypeError
        If `string_message` is not a str. This is the only
        error construction raises; malformed content is
        reported by the derived views instead.
    """
    __slots__ = (
        "_raw", "_codec", "_sentence", "_tags",
        "_attached_tags", "_message", "_timestamp"
    )

    def __init__(self,
                 string_message: str,
                 sentence: Optional[Sentence] = None,
                 *,
                 codec: Codec = DEFAULT_CODEC) -> None:
        if not isinstance(string_message, str):
            raise TypeError(
                f"Expected the raw message as str, got {type(string_message)}"
            )
        self._raw = string_message
        self._codec = codec
        self._sentence = Cell() if sentence is None else Cell.of(sentence)
        self._tags = Cell()
        self._attached_tags: Optional[PacketTags] = None
        self._message = Cell()
        self._timestamp: EPOCH_MILLIS = UNSET

    @classmethod
    def from_string(cls, string_message: str, **kwargs) -> AisPacket:
        return cls(string_message, **kwargs)

    @classmethod
    def from_bytes(cls, data: bytes, **kwargs) -> AisPacket:
        """
        Create a packet from its ASCII encoding. Bytes outside
        of ASCII are replaced rather than rejected.
        """
        return cls(bytes(data).decode(_ENCODING, errors="replace"), **kwargs)

    def to_bytes(self) -> bytes:
        """
        ASCII encoding of the raw message. Inverse of
        :meth:`from_bytes` for ASCII input.
        """
        return self._raw.encode(_ENCODING, errors="replace")

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    @property
    def string_message(self) -> str:
        return self._raw

    def get_lines(self) -> List[str]:
        """
        The raw message split into lines. Both LF and
        CRLF terminate a line; a final terminator does
        not produce an empty trailing line.
        """
        lines = _LINE_SEPARATOR.split(self._raw)
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        return lines

    # Derived views ------------------------------------------------------------

    def get_sentence(self) -> Optional[Sentence]:
        """
        The first sentence that can be assembled from the
        raw lines, or None. Parse errors are logged, not raised.
        """
        return self._sentence.compute(self._read_sentence)

    def _read_sentence(self) -> Optional[Sentence]:
        # Always start over with a fresh assembler
        assembler = self._codec.assembler()
        try:
            for line in self.get_lines():
                sentence = assembler.feed_line(line)
                if sentence is not None:
                    return sentence
        except SentenceError as err:
            logger.warning(f"Could not parse packet {self._raw!r}: {err}")
        return None

    def get_tags(self) -> Optional[PacketTags]:
        """
        Tags of the packet. Tags attached with :meth:`attach_tags`
        take the place of the ones derived from the sentence.
        None if the packet has no sentence.
        """
        if self._attached_tags is not None:
            return self._attached_tags
        return self._tags.compute(self._extract_tags)

    def _extract_tags(self) -> Optional[PacketTags]:
        sentence = self.get_sentence()
        if sentence is None:
            return None
        return self._codec.extract_tags(sentence)

    def attach_tags(self, tags: PacketTags) -> None:
        """Report `tags` from now on instead of the derived ones."""
        self._attached_tags = tags

    def get_message(self) -> Any:
        """
        The decoded AIS message, or None if the packet has
        no sentence. Decoding is attempted once; its outcome,
        success or failure, is cached.

        Raises
        ------
        MalformedPayload
            If the payload is not valid sixbit data.
        SemanticDecodeError
            If the payload does not decode into a message.
        """
        sentence = self.get_sentence()
        if sentence is None:
            return None
        return self._message.compute(
            lambda: self._codec.decode(sentence), catch=_DECODE_ERRORS
        )

    def try_get_message(self) -> Any:
        """Like :meth:`get_message` but returns None on failure."""
        try:
            return self.get_message()
        except _DECODE_ERRORS:
            return None

    def is_valid_message(self) -> bool:
        return self.try_get_message() is not None

    def get_timestamp(self) -> Optional[datetime]:
        """Wall-clock time embedded in the sentence, if any."""
        sentence = self.get_sentence()
        if sentence is None:
            return None
        return sentence.timestamp

    def get_best_timestamp(self) -> EPOCH_MILLIS:
        """
        Timestamp of the packet in milliseconds since
        the epoch, or -1 if no timestamp is available.
        """
        timestamp = self._timestamp
        if timestamp == UNSET:
            date = self.get_timestamp()
            timestamp = NO_TIMESTAMP if date is None else to_millis(date)
            self._timestamp = timestamp
        return timestamp

    def try_get_position_time(self) -> Optional[PositionTime]:
        """
        Position of the decoded message paired with the
        best timestamp, or None if there is no position.
        """
        position = position_of(self.try_get_message())
        if position is None:
            return None
        return PositionTime.create(position, self.get_best_timestamp())

    def materialize(self) -> AisPacket:
        """
        Compute every derived view so the packet can be
        read from several threads afterwards.
        """
        self.get_tags()
        self.try_get_message()
        self.get_best_timestamp()
        return self

    # Ordering -----------------------------------------------------------------

    def compare_to(self, other: AisPacket) -> int:
        """Compare by best timestamp: -1, 0 or 1."""
        mine, theirs = self.get_best_timestamp(), other.get_best_timestamp()
        return (mine > theirs) - (mine < theirs)

    def __lt__(self, other: AisPacket) -> bool:
        if not isinstance(other, AisPacket):
            return NotImplemented
        return self.get_best_timestamp() < other.get_best_timestamp()

    def __repr__(self) -> str:
        return f"<AisPacket({self._raw!r})>"
