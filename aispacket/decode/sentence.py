"""
Sentence assembly.
=================

AIS transmissions arrive as NMEA 0183 lines. A single
AIS message may span several VDM/VDO fragments and
can be preceded by lines that carry no payload:

    \\s:2573345,c:1412328385*56\\           <- tag (comment) block
    $PGHP,1,2013,3,13,10,39,18,375,219,,2190047,1,4A*57
    !AIVDM,2,1,4,A,55O0W7`00001L@gCWGA2uItLth@DqtL5@F22220j1h742t0Ht0000000,0*08
    !AIVDM,2,2,4,A,000000000000000,2*20

The :class:`SentenceAssembler` consumes these lines one
at a time and hands out a :class:`Sentence` as soon as
the last fragment of a message has been seen.
Fragment parsing itself is left to ``pyais``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import reduce
from typing import Dict, List, NamedTuple, Optional, Tuple

from pyais.exceptions import AISBaseException
from pyais.messages import NMEAMessage

from ..logger import logger
from ..structs import AisPacketError, from_millis

class SentenceError(AisPacketError):
    """A line could not be interpreted as part of a sentence."""
    pass

# Tag block values of `c` above this are milliseconds
_MILLIS_THRESHOLD = 10**11

def nmea_checksum(body: str) -> int:
    """
    XOR of all characters between the leading
    delimiter and the `*` of an NMEA line.
    """
    return reduce(lambda acc, char: acc ^ ord(char), body, 0)

def _split_checksum(text: str) -> Tuple[str, Optional[str]]:
    if "*" not in text:
        return text, None
    body, checksum = text.rsplit("*", 1)
    return body, checksum

def parse_tag_block(block: str) -> Dict[str, str]:
    """
    Parse the content of a tag block (without the
    enclosing backslashes) into a key -> value dict.

    >>> parse_tag_block("s:2573345,c:1412328385*56")
    {'s': '2573345', 'c': '1412328385'}
    """
    body, checksum = _split_checksum(block)
    if checksum is not None:
        try:
            expected = int(checksum, 16)
        except ValueError:
            raise SentenceError(f"Invalid tag block checksum '{checksum}'")
        if nmea_checksum(body) != expected:
            raise SentenceError(
                f"Tag block checksum mismatch in '{block}'"
            )
    fields = {}
    for pair in filter(None, body.split(",")):
        key, sep, value = pair.partition(":")
        if not sep:
            raise SentenceError(f"Malformed tag block field '{pair}'")
        fields[key] = value
    return fields

class GatehouseTag(NamedTuple):
    """
    Timestamp and origin carried by a Gatehouse
    `$PGHP,1,...` proprietary sentence.
    """
    timestamp: datetime
    country: str # MID of the source
    base_station: Optional[int]

def parse_gatehouse(line: str) -> Optional[GatehouseTag]:
    """
    Return the tag of a `$PGHP,1` sentence or
    None if the line is not one.
    """
    body, _ = _split_checksum(line)
    fields = body.split(",")
    if fields[0] != "$PGHP" or len(fields) < 9 or fields[1] != "1":
        return None
    try:
        year, month, day, hour, minute, second, millis = map(int, fields[2:9])
        timestamp = datetime(
            year, month, day, hour, minute, second,
            millis * 1000, tzinfo=timezone.utc
        )
    except ValueError:
        logger.debug(f"Ignoring malformed Gatehouse sentence '{line}'")
        return None
    country = fields[9] if len(fields) > 9 else ""
    bs = fields[11] if len(fields) > 11 else ""
    return GatehouseTag(timestamp, country, int(bs) if bs.isdigit() else None)

@dataclass(frozen=True)
class Sentence:
    """
    A completely assembled VDM/VDO sentence together
    with the tag block fields and proprietary lines
    that preceded it.
    """
    lines: Tuple[str, ...]
    message: NMEAMessage
    tag_block: Dict[str, str] = field(default_factory=dict)
    proprietary: Tuple[str, ...] = ()

    @property
    def gatehouse(self) -> Optional[GatehouseTag]:
        """The most recent Gatehouse tag, if any."""
        for line in reversed(self.proprietary):
            tag = parse_gatehouse(line)
            if tag is not None:
                return tag
        return None

    @property
    def timestamp(self) -> Optional[datetime]:
        """
        Wall-clock time embedded in the sentence.

        The tag block's `c` field takes precedence over
        a Gatehouse timestamp.
        """
        c = self.tag_block.get("c")
        if c:
            try:
                value = int(c)
                return from_millis(value if value > _MILLIS_THRESHOLD else value * 1000)
            except (ValueError, OverflowError):
                logger.debug(f"Ignoring unusable tag block time 'c:{c}'")
        gatehouse = self.gatehouse
        return None if gatehouse is None else gatehouse.timestamp

class SentenceAssembler:
    """
    Stateful, line-by-line assembler of :class:`Sentence` objects.

    Feed lines with :meth:`feed_line`. Every call returns either
    None (more input is needed) or a completed sentence; after
    a sentence was returned the assembler starts over. Lines that
    cannot be interpreted raise a :class:`SentenceError`, which
    also resets the assembler.
    """
    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._lines: List[str] = []
        self._tags: Dict[str, str] = {}
        self._proprietary: List[str] = []
        self._fragments: List[NMEAMessage] = []

    def _discard_incomplete(self) -> None:
        if self._fragments:
            logger.debug(
                f"Discarding {len(self._fragments)} fragment(s) "
                "of an incomplete sentence"
            )
            self._reset()

    def _fail(self, message: str) -> None:
        self._reset()
        raise SentenceError(message)

    def feed_line(self, line: str) -> Optional[Sentence]:
        line = line.rstrip("\r\n")
        stripped = line.strip()
        if not stripped:
            return None
        if stripped.startswith("\\"):
            block, sep, rest = stripped[1:].partition("\\")
            if not sep:
                self._fail(f"Unterminated tag block in '{line}'")
            try:
                tags = parse_tag_block(block)
            except SentenceError:
                self._reset()
                raise
            if not rest:
                # Stand-alone tag block: a new sentence begins
                self._discard_incomplete()
                self._tags.update(tags)
                self._lines.append(line)
                return None
            inline_tags, stripped = tags, rest
        elif stripped.startswith("$P"):
            self._discard_incomplete()
            self._proprietary.append(stripped)
            self._lines.append(line)
            return None
        else:
            inline_tags = {}
        if not stripped.startswith("!"):
            self._fail(f"Not a VDM/VDO sentence: '{line}'")
        return self._feed_fragment(line, stripped, inline_tags)

    def _feed_fragment(self,
                       line: str,
                       text: str,
                       tags: Dict[str, str]) -> Optional[Sentence]:
        try:
            fragment = NMEAMessage(text.encode("ascii"))
        except (AISBaseException, ValueError, IndexError, UnicodeEncodeError) as err:
            self._fail(f"Invalid sentence '{text}': {err}")
        if not fragment.is_valid:
            self._fail(f"Checksum mismatch in '{text}'")

        if fragment.frag_num == 1:
            self._discard_incomplete()
        elif not self._continues(fragment):
            self._fail(f"Fragment out of sequence: '{text}'")

        self._tags.update(tags)
        self._fragments.append(fragment)
        self._lines.append(line)
        if fragment.frag_num < fragment.frag_cnt:
            return None

        try:
            message = (
                self._fragments[0] if len(self._fragments) == 1 else
                NMEAMessage.assemble_from_iterable(self._fragments)
            )
        except (AISBaseException, ValueError) as err:
            self._fail(f"Could not assemble fragments: {err}")
        sentence = Sentence(
            lines=tuple(self._lines),
            message=message,
            tag_block=dict(self._tags),
            proprietary=tuple(self._proprietary),
        )
        self._reset()
        return sentence

    def _continues(self, fragment: NMEAMessage) -> bool:
        """
        Whether `fragment` is the next expected
        fragment of the pending sentence.
        """
        if not self._fragments:
            return False
        first = self._fragments[0]
        return (
            fragment.frag_num == len(self._fragments) + 1 and
            fragment.frag_cnt == first.frag_cnt and
            fragment.seq_id == first.seq_id
        )
