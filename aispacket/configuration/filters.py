"""
Filter configurations.
=====================

A filter configuration is a small, immutable description of a
filter policy. Configurations are built once (usually from a
declarative document, see :mod:`aispacket.configuration.document`)
and turned into runtime filters with :meth:`instantiate`.

Every configuration class is registered under the `kind` name
used for it in configuration documents.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, Optional, Tuple, Type

from ..structs import AisPacketError, EPOCH_MILLIS
from ..decode import PacketTags, SourceType
from ..filter import (
    PacketFilter, FilterPipeline, PastFilter, PacketTagging,
    TaggingFilter, TaggingPolicy, DEFAULT_THRESHOLD, current_millis
)

class ConfigurationError(AisPacketError):
    """Invalid filter configuration. Raised before any packet is processed."""
    pass

# kind -> configuration class
FILTER_KINDS: Dict[str, Type[FilterConfiguration]] = {}

def register(kind: str):
    """
    Class decorator registering a filter 
    configuration under `kind`.
    """
    def decorator(cls: Type[FilterConfiguration]) -> Type[FilterConfiguration]:
        if kind in FILTER_KINDS:
            raise ValueError(f"Filter kind '{kind}' is already registered.")
        cls.kind = kind
        FILTER_KINDS[kind] = cls
        return cls
    return decorator

def configuration_for(kind: str) -> Type[FilterConfiguration]:
    try:
        return FILTER_KINDS[kind]
    except KeyError:
        raise ConfigurationError(
            f"Unknown filter kind '{kind}'. "
            f"Known kinds are {sorted(FILTER_KINDS)}."
        )

class FilterConfiguration(ABC):
    kind: ClassVar[str]

    @abstractmethod
    def instantiate(self) -> PacketFilter:
        """Create the runtime filter described by this configuration."""

@register("PastFilter")
@dataclass(frozen=True)
class PastFilterConfiguration(FilterConfiguration):
    """
    Configuration of a :class:`PastFilter`.

    threshold_ms: Maximum tolerated clock skew into the future [ms].
    clock:        Reference clock of the filter; not part of documents.
    """
    threshold_ms: EPOCH_MILLIS = DEFAULT_THRESHOLD
    clock: Callable[[], EPOCH_MILLIS] = field(
        default=current_millis, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if isinstance(self.threshold_ms, bool) or not isinstance(self.threshold_ms, int):
            raise ConfigurationError(
                f"Threshold must be an integer, got {self.threshold_ms!r}"
            )
        if self.threshold_ms < 0:
            raise ConfigurationError(
                f"Threshold must not be negative, got {self.threshold_ms}"
            )

    def instantiate(self) -> PastFilter:
        return PastFilter(self.threshold_ms, clock=self.clock)

@dataclass(frozen=True)
class PacketTaggingConfiguration:
    """
    Configuration of the tags attached by a tagging
    filter and of how they are merged with the
    tags a packet already carries.
    """
    policy: str = TaggingPolicy.PRESERVE.value
    source_id: Optional[str] = None
    source_bs: Optional[int] = None
    source_country: Optional[str] = None
    source_type: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("policy", "source_id", "source_country", "source_type"):
            value = getattr(self, name)
            if value is None and name != "policy":
                continue
            if not isinstance(value, str):
                raise ConfigurationError(
                    f"Tagging {name} must be a string, got {value!r}"
                )
        if self.policy not in TaggingPolicy.__members__:
            raise ConfigurationError(
                f"Unknown tagging policy '{self.policy}'. "
                f"Expected one of {list(TaggingPolicy.__members__)}."
            )
        if self.source_type is not None and self.source_type not in SourceType.__members__:
            raise ConfigurationError(
                f"Unknown source type '{self.source_type}'."
            )
        if self.source_bs is not None and (
            isinstance(self.source_bs, bool) or not isinstance(self.source_bs, int)):
            raise ConfigurationError(
                f"Source base station must be an integer, got {self.source_bs!r}"
            )

    def instantiate(self) -> PacketTagging:
        tags = PacketTags(
            source_id=self.source_id,
            source_bs=self.source_bs,
            source_country=self.source_country,
            source_type=SourceType[self.source_type] if self.source_type else None,
        )
        return PacketTagging(TaggingPolicy[self.policy], tags)

@register("TaggingFilter")
@dataclass(frozen=True)
class TaggingFilterConfiguration(FilterConfiguration):
    """
    Configuration of a :class:`TaggingFilter`,
    which tags packets and rejects none.
    """
    tagging: PacketTaggingConfiguration = field(
        default_factory=PacketTaggingConfiguration
    )

    def instantiate(self) -> TaggingFilter:
        return TaggingFilter(self.tagging.instantiate())

@dataclass(frozen=True)
class FilterPipelineConfiguration:
    """Ordered filter configurations making up a pipeline."""
    filters: Tuple[FilterConfiguration, ...] = ()

    def __post_init__(self) -> None:
        for config in self.filters:
            if not isinstance(config, FilterConfiguration):
                raise ConfigurationError(
                    f"Expected a filter configuration, got {type(config)}"
                )

    def instantiate(self) -> FilterPipeline:
        return FilterPipeline(*(config.instantiate() for config in self.filters))
