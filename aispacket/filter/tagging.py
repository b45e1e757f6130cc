from __future__ import annotations

from enum import Enum

from ..packet import AisPacket
from ..decode import PacketTags
from .base import PacketFilter

class TaggingPolicy(Enum):
    """
    How configured tags are combined with the tags a packet already has.

    PRESERVE: Keep the packet's tags, fill in the missing ones.
    OVERRIDE: Configured tags win, packet tags fill in the rest.
    REPLACE:  Only the configured tags are kept.
    """
    PRESERVE = "PRESERVE"
    OVERRIDE = "OVERRIDE"
    REPLACE = "REPLACE"

class PacketTagging:
    """
    Computes the tags of a packet from its current
    tags, a fixed set of tags and a policy.
    """
    def __init__(self, 
                 policy: TaggingPolicy = TaggingPolicy.PRESERVE,
                 tags: PacketTags = PacketTags()) -> None:
        self.policy = policy
        self.tags = tags

    def apply(self, current: PacketTags | None) -> PacketTags:
        if current is None or self.policy is TaggingPolicy.REPLACE:
            return self.tags
        if self.policy is TaggingPolicy.PRESERVE:
            return current.merge(self.tags)
        return self.tags.merge(current)

    def tag(self, packet: AisPacket) -> AisPacket:
        packet.attach_tags(self.apply(packet.get_tags()))
        return packet

    def __repr__(self) -> str:
        return f"<PacketTagging(policy={self.policy.name},tags={self.tags})>"

class TaggingFilter(PacketFilter):
    """
    Filter that tags every packet it sees and rejects none.
    """
    def __init__(self, tagging: PacketTagging) -> None:
        self.tagging = tagging

    def rejected_by_filter(self, packet: AisPacket) -> bool:
        self.tagging.tag(packet)
        return False

    def __repr__(self) -> str:
        return f"<TaggingFilter({self.tagging!r})>"
