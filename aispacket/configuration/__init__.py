"""
Filter configuration (:mod:`aispacket.configuration`)
====================================================

Declarative filter policies and the factory turning them into
runtime filters:

    from aispacket.configuration import build_pipeline

    pipeline = build_pipeline("filters.yaml")
    for packet in pipeline.filter(packets):
        ...
"""
from .filters import (
    ConfigurationError, FilterConfiguration, FILTER_KINDS, register,
    configuration_for, PastFilterConfiguration, PacketTaggingConfiguration,
    TaggingFilterConfiguration, FilterPipelineConfiguration
)
from .document import (
    decode_filter, encode_filter, decode_pipeline, encode_pipeline,
    decode_tagging, encode_tagging, load_pipeline, build_pipeline
)
