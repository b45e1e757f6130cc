from __future__ import annotations

import time
from typing import Callable

from ..packet import AisPacket
from ..structs import EPOCH_MILLIS
from .base import PacketFilter

# 24 hours
DEFAULT_THRESHOLD: EPOCH_MILLIS = 24*60*60*1000

def current_millis() -> EPOCH_MILLIS:
    return time.time_ns() // 1_000_000

class PastFilter(PacketFilter):
    """
    Reject packets from the future.

    A packet is rejected if its best timestamp lies more than
    `threshold` milliseconds ahead of the reference clock.
    Packets without a timestamp are accepted.

    Parameters:
    - threshold (int): Tolerated clock skew into the future [ms].
    - clock (Callable): Returns the reference time in milliseconds
        since the epoch. Defaults to the system clock.
    """
    def __init__(self,
                 threshold: EPOCH_MILLIS = DEFAULT_THRESHOLD,
                 clock: Callable[[], EPOCH_MILLIS] = current_millis) -> None:
        if threshold < 0:
            raise ValueError(f"Threshold must not be negative, got {threshold}")
        self.threshold = threshold
        self.clock = clock

    def rejected_by_filter(self, packet: AisPacket) -> bool:
        timestamp = packet.get_best_timestamp()
        if timestamp < 0:
            return False
        return self.clock() - timestamp < -self.threshold

    def __repr__(self) -> str:
        return f"<PastFilter(threshold={self.threshold})>"
