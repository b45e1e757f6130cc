import os
import tempfile
import unittest
from enum import Enum

from aispacket import AisPacket, AisPacketReader, read_packets, packets_to_frame
from aispacket.decode import nmea_checksum
from aispacket.export import Columns


def nmea(body: str, start: str = "!") -> str:
    return f"{start}{body}*{nmea_checksum(body):02X}"

def tag_block(block: str) -> str:
    return f"\\{block}*{nmea_checksum(block):02X}\\"


MSG1 = nmea("AIVDM,1,1,,A,15RTgt0PAso;90TKcjM8h6g208CQ,0")
MSG1B = nmea("ABVDM,1,1,,B,177PhT001iPWhwJPsK=9DoQH0<>i,0")
MSG5 = [
    nmea("ABVDM,2,1,5,A,53aQ5aD2;PAQ0@8l000lE9LD8u8L00000000001??H<886?80@@C1F0CQ4R@,0"),
    nmea("ABVDM,2,2,5,A,@0000000000,2"),
]
BLOCK = tag_block("c:1412328385")

LINES = [
    BLOCK,
    MSG1,
    "this is not AIS",
    MSG5[0],
    MSG5[1],
    MSG1B,
]


class TestAisPacketReader(unittest.TestCase):

    def test_read_lines(self):
        reader = AisPacketReader(LINES)
        with self.assertLogs("aispacket", level="WARNING"):
            packets = list(reader)
        self.assertEqual(len(packets), 3)
        self.assertEqual(reader.count, 3)
        self.assertEqual(reader.errors, 1)

        first, second, third = packets
        self.assertEqual(first.get_lines(), [BLOCK, MSG1])
        self.assertEqual(first.string_message, f"{BLOCK}\r\n{MSG1}")
        self.assertEqual(first.get_best_timestamp(), 1412328385000)
        self.assertEqual(second.get_message().msg_type, 5)
        self.assertEqual(third.get_best_timestamp(), -1)
        self.assertEqual(third.get_message().msg_type, 1)

    def test_sentence_is_prefilled(self):
        packet = next(iter(AisPacketReader([MSG1])))
        self.assertFalse(packet._sentence.pending)

    def test_from_file(self):
        fd, path = tempfile.mkstemp(suffix=".nmea")
        try:
            with os.fdopen(fd, "w", newline="") as f:
                f.write("\r\n".join([BLOCK, MSG1, MSG1B]) + "\n")
            packets = list(read_packets(path))
            self.assertEqual(len(packets), 2)
            self.assertEqual(packets[0].get_lines(), [BLOCK, MSG1])
            self.assertEqual(packets[1].string_message, MSG1B)
        finally:
            os.remove(path)

    def test_sorting_read_packets(self):
        later = tag_block("c:1412328400")
        packets = list(read_packets([later, MSG1, BLOCK, MSG1B, MSG1]))
        ordered = sorted(packets)
        self.assertEqual(
            [p.get_best_timestamp() for p in ordered],
            [-1, 1412328385000, 1412328400000]
        )


class TestExport(unittest.TestCase):

    def test_packets_to_frame(self):
        packets = list(read_packets([BLOCK, MSG1, MSG5[0], MSG5[1]]))
        with self.assertLogs("aispacket", level="WARNING"):
            df = packets_to_frame(packets + [AisPacket.from_string("!AIVDM,bad")])
        self.assertEqual(len(df), 2)
        self.assertEqual(list(df[Columns.MESSAGE_ID]), [1, 5])
        self.assertEqual(df[Columns.TIMESTAMP].iloc[0], 1412328385000)
        self.assertEqual(df["mmsi"].iloc[0], 371798000)
        # Type 5 messages carry no position
        self.assertEqual(df["lat"].iloc[1], "NA")

    def test_custom_fields(self):
        df = packets_to_frame(read_packets([MSG1]), fields=("mmsi",))
        self.assertEqual(
            list(df.columns),
            [Columns.TIMESTAMP, Columns.RAW_MESSAGE, Columns.MESSAGE_ID, "mmsi"]
        )

    def test_enum_fields_are_unpacked(self):
        df = packets_to_frame(read_packets([MSG1, MSG1B]), fields=("status", "mmsi"))
        for status in df["status"]:
            self.assertNotIsInstance(status, Enum)
            self.assertIsInstance(status, int)
        self.assertEqual(df["mmsi"].iloc[0], 371798000)

    def test_empty_frame(self):
        df = packets_to_frame([])
        self.assertEqual(len(df), 0)
        self.assertIn("lat", df.columns)


if __name__ == "__main__":
    unittest.main()
