"""
Packet filters and filter pipelines.

A filter decides whether a packet is rejected. Filters
hold only immutable parameters, so a pipeline can be built
once and shared by any number of threads evaluating
different packets.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generator, Iterable, Tuple

from ..logger import logger
from ..packet import AisPacket

def log_rejection_rate(n_rejected: int, n_total: int) -> None:
    if n_total == 0:
        logger.warning("No packets to filter.")
        return
    logger.info(
        f"Filtered {n_total} packets. "
        f"{n_rejected/n_total*100:.2f}% rejected."
    )

class PacketFilter(ABC):
    """
    Base class of all packet filters.

    Subclasses implement :meth:`rejected_by_filter`, which
    must not raise for any packet. Calling a filter returns
    True if the packet is accepted.
    """

    @abstractmethod
    def rejected_by_filter(self, packet: AisPacket) -> bool:
        """Return True if `packet` is to be rejected."""

    def accepts(self, packet: AisPacket) -> bool:
        return not self.rejected_by_filter(packet)

    def __call__(self, packet: AisPacket) -> bool:
        return self.accepts(packet)

class FilterPipeline(PacketFilter):
    """
    Ordered sequence of filters.
    ===========================

    A packet passes the pipeline if every filter accepts it.
    Filters are evaluated in order and evaluation stops at
    the first rejection, so later filters (e.g. tagging ones)
    only see packets the earlier ones accepted.
    """
    def __init__(self, *filters: PacketFilter) -> None:
        for f in filters:
            if not isinstance(f, PacketFilter):
                raise TypeError(f"Expected a PacketFilter, got {type(f)}")
        self.filters: Tuple[PacketFilter, ...] = filters

    def rejected_by_filter(self, packet: AisPacket) -> bool:
        return any(f.rejected_by_filter(packet) for f in self.filters)

    def filter(self, packets: Iterable[AisPacket]) -> Generator[AisPacket, None, None]:
        """Yield the packets accepted by the pipeline."""
        n_total = n_rejected = 0
        for packet in packets:
            n_total += 1
            if self.rejected_by_filter(packet):
                n_rejected += 1
                continue
            yield packet
        log_rejection_rate(n_rejected, n_total)

    def __len__(self) -> int:
        return len(self.filters)

    def __repr__(self) -> str:
        return f"<FilterPipeline({', '.join(map(repr, self.filters))})>"
