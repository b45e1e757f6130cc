from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from .sentence import Sentence

class SourceType(Enum):
    """
    Origin of a packet: terrestrial (live)
    receivers or satellites.
    """
    LIVE = "LIVE"
    SAT = "SAT"

    @classmethod
    def from_value(cls, value: str) -> SourceType:
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(f"Source type '{value}' not found.")

@dataclass(frozen=True)
class PacketTags:
    """
    Metadata of a packet: when it was received
    and where it came from. Every field is optional.
    """
    timestamp: Optional[datetime] = None
    source_id: Optional[str] = None
    source_bs: Optional[int] = None
    source_country: Optional[str] = None
    source_type: Optional[SourceType] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def merge(self, other: PacketTags) -> PacketTags:
        """
        Return a copy of these tags in which every
        missing field is taken from `other`.
        """
        missing = {
            f.name: getattr(other, f.name) for f in fields(self)
            if getattr(self, f.name) is None
        }
        return replace(self, **missing)

# Comment block keys used by the Danish Maritime Authority
# besides the standard NMEA `c` and `s` keys
_SOURCE_ID = "si"
_SOURCE_BS = "sb"
_SOURCE_COUNTRY = "sc"
_SOURCE_TYPE = "st"

def _int_or_none(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

class TagExtractor:
    """
    Derive :class:`PacketTags` from a sentence's tag block,
    falling back on a Gatehouse proprietary sentence.
    """

    def __call__(self, sentence: Sentence) -> PacketTags:
        return self.extract(sentence)

    def extract(self, sentence: Sentence) -> PacketTags:
        block = sentence.tag_block
        source_type = block.get(_SOURCE_TYPE)
        try:
            source_type = SourceType.from_value(source_type) if source_type else None
        except ValueError:
            source_type = None
        tags = PacketTags(
            timestamp=sentence.timestamp,
            source_id=block.get(_SOURCE_ID) or block.get("s"),
            source_bs=_int_or_none(block.get(_SOURCE_BS)),
            source_country=block.get(_SOURCE_COUNTRY),
            source_type=source_type,
        )
        gatehouse = sentence.gatehouse
        if gatehouse is not None:
            tags = tags.merge(PacketTags(
                source_bs=gatehouse.base_station,
                source_country=gatehouse.country or None,
            ))
        return tags
