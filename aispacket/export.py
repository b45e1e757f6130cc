"""
This module tabulates decoded packets as pandas DataFrames,
one row per packet, one column per requested message field.
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Union

import numpy as np
import pandas as pd

from .logger import logger
from .packet import AisPacket
from .reader import read_packets

# Default value for missing data
_NA = "NA"

# Fields of position reports (types 1,2,3,18)
POSITION_FIELDS = ("mmsi", "lat", "lon", "speed", "course", "heading")

class Columns:
    """
    Columns prepended to the decoded
    message fields of every frame.
    """
    TIMESTAMP: str = "timestamp"
    RAW_MESSAGE: str = "raw_message"
    MESSAGE_ID: str = "msg_type"

def _field_value(message, field: str):
    value = getattr(message, field, _NA)
    # pyais uses enums for some of the fields
    return value.value if isinstance(value, Enum) else value

def _extract_fields(messages: List, fields: Sequence[str]) -> Dict[str, np.ndarray]:
    """
    One object column per field, in message order.
    """
    columns = {}
    for field in fields:
        column = np.empty(len(messages), dtype=object)
        for row, message in enumerate(messages):
            column[row] = _field_value(message, field)
        columns[field] = column
    return columns

def packets_to_frame(packets: Iterable[AisPacket],
                     fields: Sequence[str] = POSITION_FIELDS) -> pd.DataFrame:
    """
    Decode `packets` and collect the requested message
    fields. Packets that cannot be decoded are dropped.
    """
    kept: List[AisPacket] = []
    messages = []
    n_dropped = 0
    for packet in packets:
        message = packet.try_get_message()
        if message is None:
            n_dropped += 1
            continue
        kept.append(packet)
        messages.append(message)
    if n_dropped:
        logger.warning(f"Dropped {n_dropped} packet(s) that could not be decoded.")

    df = pd.DataFrame({
        Columns.TIMESTAMP: [p.get_best_timestamp() for p in kept],
        Columns.RAW_MESSAGE: [p.string_message for p in kept],
        Columns.MESSAGE_ID: [getattr(m, "msg_type", _NA) for m in messages],
    })
    if fields:
        df = df.assign(**_extract_fields(messages, fields))
    return df

def decode_from_file(source: Union[str, Path],
                     fields: Sequence[str] = POSITION_FIELDS) -> pd.DataFrame:
    """
    Read all packets of a file of raw NMEA lines
    and tabulate them.
    """
    logger.info(f"Decoding {source}")
    return packets_to_frame(read_packets(source), fields)
