import os
import tempfile
import unittest

from aispacket import AisPacket
from aispacket.configuration import (
    ConfigurationError, FILTER_KINDS, PastFilterConfiguration,
    PacketTaggingConfiguration, TaggingFilterConfiguration,
    FilterPipelineConfiguration, decode_filter, encode_filter,
    decode_pipeline, encode_pipeline, load_pipeline, build_pipeline
)
from aispacket.decode import PacketTags, SourceType
from aispacket.filter import (
    FilterPipeline, PastFilter, TaggingFilter, TaggingPolicy
)
from aispacket.structs import from_millis

NOW = 1_600_000_000_000

PIPELINE_YAML = """
filters:
  - kind: PastFilter
    thresholdMs: 5000
  - kind: TaggingFilter
    tagging:
      policy: OVERRIDE
      tags:
        sourceId: AISD
        sourceBs: 2190047
        sourceType: SAT
"""


class FakeSentence:
    def __init__(self, timestamp=None) -> None:
        self.timestamp = timestamp


def packet_at(millis) -> AisPacket:
    return AisPacket("S", FakeSentence(from_millis(millis)))


class TestPastFilterConfiguration(unittest.TestCase):

    def test_default(self):
        config = PastFilterConfiguration()
        self.assertEqual(config.threshold_ms, 86_400_000)
        f = config.instantiate()
        self.assertIsInstance(f, PastFilter)
        self.assertEqual(f.threshold, 86_400_000)

    def test_threshold(self):
        f = PastFilterConfiguration(5000, clock=lambda: NOW).instantiate()
        self.assertTrue(f(packet_at(NOW + 4000)))
        self.assertFalse(f(packet_at(NOW + 6000)))

    def test_invalid_threshold(self):
        for threshold in (-1, 1.5, "5000", True):
            with self.assertRaises(ConfigurationError):
                PastFilterConfiguration(threshold)


class TestTaggingFilterConfiguration(unittest.TestCase):

    def test_default(self):
        f = TaggingFilterConfiguration().instantiate()
        self.assertIsInstance(f, TaggingFilter)
        self.assertIs(f.tagging.policy, TaggingPolicy.PRESERVE)
        self.assertTrue(f.tagging.tags.is_empty())

    def test_nested_tagging(self):
        config = TaggingFilterConfiguration(PacketTaggingConfiguration(
            policy="REPLACE", source_id="AISD", source_type="LIVE"
        ))
        tagging = config.instantiate().tagging
        self.assertIs(tagging.policy, TaggingPolicy.REPLACE)
        self.assertEqual(
            tagging.tags, PacketTags(source_id="AISD", source_type=SourceType.LIVE)
        )

    def test_invalid_tagging(self):
        for kwargs in (
            dict(policy="APPEND"),
            dict(source_type="RADIO"),
            dict(source_bs="2190047"),
        ):
            with self.assertRaises(ConfigurationError):
                PacketTaggingConfiguration(**kwargs)


class TestDocuments(unittest.TestCase):

    def test_registered_kinds(self):
        self.assertIs(FILTER_KINDS["PastFilter"], PastFilterConfiguration)
        self.assertIs(FILTER_KINDS["TaggingFilter"], TaggingFilterConfiguration)

    def test_decode_past_filter(self):
        self.assertEqual(
            decode_filter({"kind": "PastFilter"}), PastFilterConfiguration()
        )
        self.assertEqual(
            decode_filter({"kind": "PastFilter", "thresholdMs": 5000}),
            PastFilterConfiguration(5000)
        )

    def test_decode_tagging_filter(self):
        config = decode_filter({
            "kind": "TaggingFilter",
            "tagging": {"policy": "OVERRIDE", "tags": {"sourceCountry": "DNK"}}
        })
        self.assertEqual(config, TaggingFilterConfiguration(
            PacketTaggingConfiguration(policy="OVERRIDE", source_country="DNK")
        ))

    def test_encode(self):
        config = FilterPipelineConfiguration((
            PastFilterConfiguration(5000),
            TaggingFilterConfiguration(PacketTaggingConfiguration(source_id="AISD")),
        ))
        doc = encode_pipeline(config)
        self.assertEqual(doc, {"filters": [
            {"kind": "PastFilter", "thresholdMs": 5000},
            {"kind": "TaggingFilter",
             "tagging": {"policy": "PRESERVE", "tags": {"sourceId": "AISD"}}},
        ]})
        self.assertEqual(decode_pipeline(doc), config)
        self.assertEqual(
            encode_filter(PastFilterConfiguration()),
            {"kind": "PastFilter", "thresholdMs": 86_400_000}
        )

    def test_invalid_documents(self):
        for doc in (
            {"kind": "FutureFilter"},
            {"thresholdMs": 5000},
            {"kind": "PastFilter", "thresholdMs": -5},
            {"kind": "PastFilter", "threshold": 5},
            {"kind": "TaggingFilter", "tagging": {"tags": {"source": "x"}}},
            {"kind": "TaggingFilter", "tagging": ["PRESERVE"]},
            {"kind": "TaggingFilter", "tagging": {"policy": ["PRESERVE"]}},
            {"kind": "TaggingFilter", "tagging": {"policy": None}},
            {"kind": "TaggingFilter", "tagging": {"tags": {"sourceType": {"a": 1}}}},
            {"kind": "TaggingFilter", "tagging": {"tags": {"sourceId": 123}}},
            {"kind": "TaggingFilter", "tagging": {"tags": {"sourceCountry": ["DNK"]}}},
            ["PastFilter"],
        ):
            with self.assertRaises(ConfigurationError):
                decode_filter(doc)

    def test_pipeline_document(self):
        self.assertEqual(decode_pipeline([]), FilterPipelineConfiguration())
        self.assertEqual(
            decode_pipeline([{"kind": "PastFilter"}]),
            decode_pipeline({"filters": [{"kind": "PastFilter"}]}),
        )
        with self.assertRaises(ConfigurationError):
            decode_pipeline({"filters": {"kind": "PastFilter"}})
        with self.assertRaises(ConfigurationError):
            decode_pipeline({"pipeline": []})


class TestLoadPipeline(unittest.TestCase):

    def setUp(self):
        fd, self.path = tempfile.mkstemp(suffix=".yaml")
        with os.fdopen(fd, "w") as f:
            f.write(PIPELINE_YAML)

    def tearDown(self):
        os.remove(self.path)

    def test_load(self):
        with self.assertLogs("aispacket", level="INFO"):
            config = load_pipeline(self.path)
        self.assertEqual(len(config.filters), 2)
        self.assertEqual(config.filters[0], PastFilterConfiguration(5000))
        self.assertEqual(config.filters[1].tagging.source_bs, 2190047)

    def test_build(self):
        pipeline = build_pipeline(self.path)
        self.assertIsInstance(pipeline, FilterPipeline)
        past, tagging = pipeline.filters
        self.assertEqual(past.threshold, 5000)
        self.assertIs(tagging.tagging.policy, TaggingPolicy.OVERRIDE)
        self.assertEqual(tagging.tagging.tags.source_type, SourceType.SAT)

    def test_unparsable_file(self):
        with open(self.path, "w") as f:
            f.write("filters: [kind: PastFilter")
        with self.assertRaises(ConfigurationError):
            load_pipeline(self.path)


if __name__ == "__main__":
    unittest.main()
