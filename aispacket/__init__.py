from .logger import logger

from .structs import Position, PositionTime, AisPacketError
from .decode import (
    PacketTags, SourceType, Sentence, SentenceAssembler, Codec,
    SentenceError, MalformedPayload, SemanticDecodeError
)
from .packet import AisPacket
from .reader import AisPacketReader, read_packets
from .filter import FilterPipeline, PastFilter, TaggingFilter, PacketTagging
from .configuration import (
    PastFilterConfiguration, TaggingFilterConfiguration,
    PacketTaggingConfiguration, ConfigurationError,
    build_pipeline, load_pipeline
)
from .export import packets_to_frame, decode_from_file

__version__ = "0.1.0"
logger.debug(f"You are using aispacket version {__version__}")
