"""Tests for caret value rules extracted from single ElementDefinitions.

This test module verifies:
1. Claimed paths (id, path and anything other extractors processed) never produce rules
2. constraint[n] indices are rewritten relative to the snapshot
3. mapping[n] indices are rewritten using whole-entry equality
4. Missing snapshot information leaves the index, adds a comment and logs a warning
5. Empty values are skipped with an error
"""

import logging

from fsh_exporter.extractor.element_caret_extractor import (
    ElementCaretExtractor,
    ProcessableElementDefinition,
    find_matching_snapshot,
)
from fsh_exporter.utils.values import FshCode

EXTRACTOR_LOGGER = "fsh_exporter.extractor.element_caret_extractor"


def _snapshot_sd(*elements):
    return {"name": "MyObservation", "snapshot": {"element": list(elements)}}


def _warnings(caplog):
    return [r for r in caplog.records if r.levelno == logging.WARNING]


class TestClaimedPaths:
    def test_id_and_path_are_claimed(self):
        """id and path never become caret rules and are recorded as processed."""
        element = ProcessableElementDefinition(
            {"id": "Observation.status", "path": "Observation.status", "short": "Status"}
        )

        rules = ElementCaretExtractor().process(element, {"name": "MyObservation"}, None)

        assert [rule.caret_path for rule in rules] == ["short"]
        assert rules[0].path == "status"
        assert rules[0].value == "Status"
        assert "id" in element.processed_paths
        assert "path" in element.processed_paths

    def test_previously_processed_paths_are_skipped(self):
        """Leaves claimed by another extractor produce no rule."""
        element = ProcessableElementDefinition(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "short": "Code",
                "comment": "A comment",
                "min": 1,
            },
            processed_paths=["short", "min"],
        )

        rules = ElementCaretExtractor().process(element, {"name": "MyObservation"}, None)

        assert [rule.caret_path for rule in rules] == ["comment"]

    def test_resolver_sees_only_unclaimed_entries(self):
        """The index passed to the resolver refers to the filtered entry list."""
        calls = []

        def resolver(index, entries, kind, fisher):
            calls.append((index, entries[index][0], kind))
            return entries[index][1]

        element = ProcessableElementDefinition(
            {"id": "Observation.code", "path": "Observation.code", "short": "s", "definition": "d"}
        )

        ElementCaretExtractor(resolver=resolver).process(element, {"name": "X"}, None)

        assert calls == [
            (0, "short", "ElementDefinition"),
            (1, "definition", "ElementDefinition"),
        ]

    def test_root_element_uses_dot_path(self):
        element = ProcessableElementDefinition(
            {"id": "Observation", "path": "Observation", "short": "Root"}
        )

        rules = ElementCaretExtractor().process(element, {"name": "MyObservation"}, None)

        assert rules[0].path == "."
        assert rules[0].to_fsh() == '* . ^short = "Root"'


class TestConstraintIndices:
    def test_constraint_index_is_relative_to_snapshot(self, caplog):
        """Differential constraint[0] with key ele-1 maps to snapshot constraint[2]."""
        sd = _snapshot_sd(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "constraint": [{"key": "a"}, {"key": "b"}, {"key": "ele-1", "human": "Human"}],
            }
        )
        element = ProcessableElementDefinition(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "constraint": [{"key": "ele-1", "human": "Human"}],
            }
        )

        with caplog.at_level(logging.WARNING, logger=EXTRACTOR_LOGGER):
            rules = ElementCaretExtractor().process(element, sd, None)

        assert [rule.caret_path for rule in rules] == ["constraint[2].key", "constraint[2].human"]
        assert all(rule.fsh_comment is None for rule in rules)
        assert _warnings(caplog) == []

    def test_missing_snapshot_keeps_index_and_warns(self, caplog):
        """Without a snapshot the differential index is kept and flagged."""
        element = ProcessableElementDefinition(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "constraint": [{"key": "ele-1"}],
            }
        )

        with caplog.at_level(logging.WARNING, logger=EXTRACTOR_LOGGER):
            rules = ElementCaretExtractor().process(element, {"name": "MyObservation"}, None)

        assert len(rules) == 1
        assert rules[0].caret_path == "constraint[0].key"
        assert rules[0].fsh_comment.startswith(
            "WARNING: The constraint index in the following rule (e.g., constraint[0]) may be incorrect."
        )
        assert len(_warnings(caplog)) == 1
        assert "MyObservation" in _warnings(caplog)[0].getMessage()

    def test_one_warning_per_affected_rule(self, caplog):
        element = ProcessableElementDefinition(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "constraint": [{"key": "ele-1", "severity": "error"}],
            }
        )

        with caplog.at_level(logging.WARNING, logger=EXTRACTOR_LOGGER):
            rules = ElementCaretExtractor().process(element, {"name": "MyObservation"}, None)

        assert len(rules) == 2
        assert rules[1].value == FshCode("error")
        assert len(_warnings(caplog)) == 2

    def test_unknown_key_keeps_index(self, caplog):
        sd = _snapshot_sd(
            {"id": "Observation.code", "path": "Observation.code", "constraint": [{"key": "other"}]}
        )
        element = ProcessableElementDefinition(
            {"id": "Observation.code", "path": "Observation.code", "constraint": [{"key": "ele-1"}]}
        )

        with caplog.at_level(logging.WARNING, logger=EXTRACTOR_LOGGER):
            rules = ElementCaretExtractor().process(element, sd, None)

        assert rules[0].caret_path == "constraint[0].key"
        assert rules[0].fsh_comment is not None
        assert len(_warnings(caplog)) == 1

    def test_choice_slice_matches_alternate_id(self):
        """Observation.valueQuantity matches the snapshot id Observation.value[x]:valueQuantity."""
        sd = _snapshot_sd(
            {"id": "Observation.value[x]", "path": "Observation.value[x]"},
            {
                "id": "Observation.value[x]:valueQuantity",
                "path": "Observation.value[x]",
                "constraint": [{"key": "ele-1"}, {"key": "qty-1"}],
            },
        )
        element = ProcessableElementDefinition(
            {
                "id": "Observation.valueQuantity",
                "path": "Observation.valueQuantity",
                "constraint": [{"key": "qty-1"}],
            }
        )

        rules = ElementCaretExtractor().process(element, sd, None)

        assert rules[0].path == "valueQuantity"
        assert rules[0].caret_path == "constraint[1].key"
        assert rules[0].fsh_comment is None


class TestMappingIndices:
    def test_mapping_index_uses_whole_entry_equality(self):
        sd = _snapshot_sd(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "mapping": [
                    {"identity": "rim", "map": "CD"},
                    {"identity": "v2", "map": "OBX-3"},
                ],
            }
        )
        element = ProcessableElementDefinition(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "mapping": [{"identity": "v2", "map": "OBX-3"}],
            }
        )

        rules = ElementCaretExtractor().process(element, sd, None)

        assert [rule.caret_path for rule in rules] == ["mapping[1].identity", "mapping[1].map"]
        assert all(rule.fsh_comment is None for rule in rules)

    def test_partially_equal_mapping_does_not_match(self, caplog):
        sd = _snapshot_sd(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "mapping": [{"identity": "v2", "map": "OBX-3"}],
            }
        )
        element = ProcessableElementDefinition(
            {
                "id": "Observation.code",
                "path": "Observation.code",
                "mapping": [{"identity": "v2", "map": "OBX-5"}],
            }
        )

        with caplog.at_level(logging.WARNING, logger=EXTRACTOR_LOGGER):
            rules = ElementCaretExtractor().process(element, sd, None)

        assert [rule.caret_path for rule in rules] == ["mapping[0].identity", "mapping[0].map"]
        assert all(rule.fsh_comment.startswith("WARNING: The mapping index") for rule in rules)
        assert len(_warnings(caplog)) == 2


class TestEmptyValues:
    def test_empty_value_is_skipped_with_error(self, caplog):
        def resolver(index, entries, kind, fisher):
            key, value = entries[index]
            return "" if key == "short" else value

        element = ProcessableElementDefinition(
            {"id": "Observation.code", "path": "Observation.code", "short": "x", "comment": "y"}
        )

        with caplog.at_level(logging.ERROR, logger=EXTRACTOR_LOGGER):
            rules = ElementCaretExtractor(resolver=resolver).process(
                element, {"name": "MyObservation"}, None
            )

        assert [rule.caret_path for rule in rules] == ["comment"]
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "MyObservation" in errors[0].getMessage()
        assert "code.short" in errors[0].getMessage()


def test_find_matching_snapshot_prefers_exact_id():
    exact = {"id": "Observation.code"}
    sd = _snapshot_sd({"id": "Observation"}, exact)

    assert find_matching_snapshot("Observation.code", sd) is exact
    assert find_matching_snapshot("Observation.subject", sd) is None


def test_primitive_extension_is_written_on_the_primitive():
    element = ProcessableElementDefinition(
        {
            "id": "Observation.code",
            "path": "Observation.code",
            "_short": {"extension": [{"url": "http://x", "valueString": "t"}]},
        }
    )

    rules = ElementCaretExtractor().process(element, {"name": "MyObservation"}, None)

    assert [rule.to_fsh() for rule in rules] == [
        '* code ^short.extension[0].url = "http://x"',
        '* code ^short.extension[0].valueString = "t"',
    ]
