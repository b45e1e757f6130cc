"""
Declarative filter documents.
============================

Encoding and decoding of filter configurations to and from plain
documents (dicts and lists, as produced by a YAML or JSON parser).
The document schema is kept apart from the configuration classes:

    filters:
      - kind: PastFilter
        thresholdMs: 86400000        # integer >= 0
      - kind: TaggingFilter
        tagging:
          policy: PRESERVE           # PRESERVE | OVERRIDE | REPLACE
          tags:
            sourceId: AISD
            sourceBs: 2190047
            sourceCountry: DNK
            sourceType: LIVE         # LIVE | SAT

Every error in a document raises a :class:`ConfigurationError`.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Tuple, Union

import yaml

from ..logger import logger
from ..filter import FilterPipeline
from .filters import (
    ConfigurationError, FilterConfiguration, FilterPipelineConfiguration,
    PastFilterConfiguration, PacketTaggingConfiguration,
    TaggingFilterConfiguration, configuration_for
)

Document = Dict[str, Any]

# Document keys of the tags -> configuration fields
_TAG_KEYS = {
    "sourceId": "source_id",
    "sourceBs": "source_bs",
    "sourceCountry": "source_country",
    "sourceType": "source_type",
}

def _expect_mapping(doc: Any, where: str) -> Mapping:
    if not isinstance(doc, Mapping):
        raise ConfigurationError(
            f"Expected a mapping for {where}, got {type(doc).__name__}"
        )
    return doc

def _check_keys(doc: Mapping, allowed: set, where: str) -> None:
    unknown = set(doc) - allowed
    if unknown:
        raise ConfigurationError(
            f"Unknown key(s) {sorted(unknown)} in {where}. "
            f"Allowed keys are {sorted(allowed)}."
        )

# Past filter ------------------------------------------------------------------

def _decode_past(doc: Mapping) -> PastFilterConfiguration:
    _check_keys(doc, {"thresholdMs"}, "PastFilter")
    if "thresholdMs" not in doc:
        return PastFilterConfiguration()
    return PastFilterConfiguration(doc["thresholdMs"])

def _encode_past(config: PastFilterConfiguration) -> Document:
    return {"thresholdMs": config.threshold_ms}

# Tagging filter ---------------------------------------------------------------

def decode_tagging(doc: Any) -> PacketTaggingConfiguration:
    doc = _expect_mapping(doc, "tagging")
    _check_keys(doc, {"policy", "tags"}, "tagging")
    tags = _expect_mapping(doc.get("tags") or {}, "tags")
    _check_keys(tags, set(_TAG_KEYS), "tags")
    kwargs = {_TAG_KEYS[key]: value for key, value in tags.items()}
    if "policy" in doc:
        kwargs["policy"] = doc["policy"]
    return PacketTaggingConfiguration(**kwargs)

def encode_tagging(config: PacketTaggingConfiguration) -> Document:
    tags = {
        key: getattr(config, name) for key, name in _TAG_KEYS.items()
        if getattr(config, name) is not None
    }
    return {"policy": config.policy, "tags": tags}

def _decode_tagging_filter(doc: Mapping) -> TaggingFilterConfiguration:
    _check_keys(doc, {"tagging"}, "TaggingFilter")
    if "tagging" not in doc:
        return TaggingFilterConfiguration()
    return TaggingFilterConfiguration(decode_tagging(doc["tagging"]))

def _encode_tagging_filter(config: TaggingFilterConfiguration) -> Document:
    return {"tagging": encode_tagging(config.tagging)}

# kind -> (decoder, encoder)
_CODECS: Dict[str, Tuple[Callable[[Mapping], FilterConfiguration],
                         Callable[[Any], Document]]] = {
    "PastFilter": (_decode_past, _encode_past),
    "TaggingFilter": (_decode_tagging_filter, _encode_tagging_filter),
}

def decode_filter(doc: Any) -> FilterConfiguration:
    """Build a filter configuration from its document."""
    doc = dict(_expect_mapping(doc, "filter"))
    kind = doc.pop("kind", None)
    if not isinstance(kind, str):
        raise ConfigurationError(f"Filter document without a valid 'kind': {doc}")
    configuration_for(kind)
    if kind not in _CODECS:
        raise ConfigurationError(f"No document schema for filter kind '{kind}'.")
    decoder, _ = _CODECS[kind]
    return decoder(doc)

def encode_filter(config: FilterConfiguration) -> Document:
    """Inverse of :func:`decode_filter`."""
    if config.kind not in _CODECS:
        raise ConfigurationError(f"No document schema for filter kind '{config.kind}'.")
    _, encoder = _CODECS[config.kind]
    return {"kind": config.kind, **encoder(config)}

def decode_pipeline(doc: Any) -> FilterPipelineConfiguration:
    """
    Build a pipeline configuration from a document that is
    either a list of filters or a mapping with a `filters` list.
    """
    if isinstance(doc, Mapping):
        _check_keys(doc, {"filters"}, "pipeline")
        doc = doc.get("filters") or []
    if not isinstance(doc, list):
        raise ConfigurationError(
            f"Expected a list of filters, got {type(doc).__name__}"
        )
    return FilterPipelineConfiguration(tuple(decode_filter(f) for f in doc))

def encode_pipeline(config: FilterPipelineConfiguration) -> Document:
    return {"filters": [encode_filter(f) for f in config.filters]}

def load_pipeline(path: Union[str, Path]) -> FilterPipelineConfiguration:
    """Read a pipeline configuration from a YAML (or JSON) file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            doc = yaml.safe_load(f)
        except yaml.YAMLError as err:
            raise ConfigurationError(f"Could not parse {path}: {err}") from err
    config = decode_pipeline(doc if doc is not None else [])
    logger.info(f"Loaded {len(config.filters)} filter(s) from {path}")
    return config

def build_pipeline(source: Union[str, Path, Document, list]) -> FilterPipeline:
    """
    Instantiate the filter pipeline described by a
    configuration file or an already parsed document.
    """
    if isinstance(source, (str, Path)):
        config = load_pipeline(source)
    else:
        config = decode_pipeline(source)
    return config.instantiate()
