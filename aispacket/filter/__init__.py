"""
Runtime packet filters (:mod:`aispacket.filter`)

Filters are usually not built by hand but instantiated
from a filter configuration, see :mod:`aispacket.configuration`.
"""
from .base import PacketFilter, FilterPipeline, log_rejection_rate
from .past import PastFilter, DEFAULT_THRESHOLD, current_millis
from .tagging import PacketTagging, TaggingPolicy, TaggingFilter
