"""
Decoding collaborators of a packet (:mod:`aispacket.decode`)
=============================

A packet turns its raw lines into a decoded message in three steps:
    1. Assemble the lines into a sentence (:class:`SentenceAssembler`)
    2. Derive the packet tags from the sentence (:class:`TagExtractor`)
    3. Decode the sentence payload (:class:`MessageDecoder`)

The :class:`Codec` bundles the three so packets can be
given alternative implementations.
"""
from dataclasses import dataclass
from typing import Any, Callable

from .sentence import (
    Sentence, SentenceAssembler, SentenceError,
    GatehouseTag, parse_gatehouse, parse_tag_block, nmea_checksum
)
from .tags import PacketTags, SourceType, TagExtractor
from .message import (
    MessageDecoder, MalformedPayload, SemanticDecodeError,
    PositionCapable, position_of
)

@dataclass(frozen=True)
class Codec:
    """
    assembler:    Factory of fresh, stateful sentence assemblers.
    extract_tags: Sentence -> PacketTags
    decode:       Sentence -> decoded message
    """
    assembler: Callable[[], SentenceAssembler] = SentenceAssembler
    extract_tags: Callable[[Sentence], PacketTags] = TagExtractor()
    decode: Callable[[Sentence], Any] = MessageDecoder()

DEFAULT_CODEC = Codec()
