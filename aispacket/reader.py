"""
Reading packets from a stream of lines.

The reader feeds lines to a single :class:`SentenceAssembler` and
turns every completed sentence into an :class:`AisPacket`. Lines that
cannot be parsed are logged and skipped; they never end the stream.
"""
from __future__ import annotations

from io import TextIOBase
from pathlib import Path
from typing import Generator, Iterable, Iterator, Union

from .logger import logger
from .packet import AisPacket
from .decode import DEFAULT_CODEC, Codec, SentenceError

PacketSource = Union[str, Path, TextIOBase, Iterable[str]]

class AisPacketReader:
    """
    Iterator over the packets contained in `lines`.

    Attributes:
        `errors` (int): Number of lines that could
                        not be parsed so far.
        `count` (int):  Number of packets read so far.
    """
    def __init__(self, lines: Iterable[str], codec: Codec = DEFAULT_CODEC) -> None:
        self.lines = lines
        self.codec = codec
        self.errors = 0
        self.count = 0

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> Generator[AisPacket, None, None]:
        """
        Yield the packets of an ASCII encoded text file.
        """
        with open(path, "r", encoding="ascii", errors="replace", newline="") as handle:
            yield from cls(handle, **kwargs)

    def __iter__(self) -> Iterator[AisPacket]:
        return self.read()

    def read(self) -> Generator[AisPacket, None, None]:
        assembler = self.codec.assembler()
        for number, line in enumerate(self.lines, start=1):
            try:
                sentence = assembler.feed_line(line)
            except SentenceError as err:
                self.errors += 1
                logger.warning(f"Skipping line {number}: {err}")
                continue
            if sentence is None:
                continue
            self.count += 1
            yield AisPacket(
                "\r\n".join(sentence.lines), sentence, codec=self.codec
            )
        if self.errors:
            logger.info(
                f"Read {self.count} packets, "
                f"skipped {self.errors} unparsable lines."
            )

def read_packets(source: PacketSource, **kwargs) -> Generator[AisPacket, None, None]:
    """
    Read packets from a file path, an open text
    stream or any iterable of lines.
    """
    if isinstance(source, (str, Path)):
        yield from AisPacketReader.from_file(source, **kwargs)
    else:
        yield from AisPacketReader(source, **kwargs)
