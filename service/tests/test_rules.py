from fsh_exporter.model import (
    AssignmentRule,
    CaretValueRule,
    ConceptRule,
    ExportableAlias,
    ExportableInstance,
    ExportableInvariant,
    ExportableMapping,
    InstanceUsage,
    MappingRule,
    ObeysRule,
    ValueSetConceptComponentRule,
    ValueSetFilter,
    ValueSetFilterComponentRule,
)
from fsh_exporter.utils.values import FshCode


class TestCaretValueRule:
    def test_definition_level(self):
        assert CaretValueRule(path="", caret_path="experimental", value=True).to_fsh() == (
            "* ^experimental = true"
        )

    def test_element_level(self):
        rule = CaretValueRule(path="code", caret_path="short", value="Code")
        assert rule.to_fsh() == '* code ^short = "Code"'

    def test_comment_lines_come_first(self):
        rule = CaretValueRule(
            path="code", caret_path="constraint[0].key", value="k", fsh_comment="line one\nline two"
        )
        assert rule.to_fsh() == '// line one\n// line two\n* code ^constraint[0].key = "k"'

    def test_instance_value_is_not_quoted(self):
        rule = CaretValueRule(path="", caret_path="contained[0]", value="Inline1", is_instance=True)
        assert rule.to_fsh() == "* ^contained[0] = Inline1"


def test_assignment_rule():
    assert AssignmentRule(path="status", value=FshCode("final")).to_fsh() == "* status = #final"
    assert AssignmentRule(path="valueInteger", value=1, exactly=True).to_fsh() == (
        "* valueInteger = 1 (exactly)"
    )


def test_obeys_rule():
    assert ObeysRule(keys=("inv-1",)).to_fsh() == "* obeys inv-1"
    assert ObeysRule(path="code", keys=("inv-1", "inv-2")).to_fsh() == "* code obeys inv-1 and inv-2"


def test_concept_rule():
    assert ConceptRule(code="a", display="A").to_fsh() == '* #a "A"'
    assert ConceptRule(code="b", definition="Def", hierarchy=("a",)).to_fsh() == '* #a #b "" "Def"'


def test_value_set_concept_component_rule():
    rule = ValueSetConceptComponentRule(
        concepts=(FshCode("1", "$sct", "One"), FshCode("2", "$sct")),
        value_sets=("OtherVS",),
    )
    assert rule.to_fsh() == (
        '* include $sct#1 "One" from valueset OtherVS\n* include $sct#2 from valueset OtherVS'
    )


def test_value_set_filter_component_rule():
    rule = ValueSetFilterComponentRule(
        inclusion=False,
        system="$sct",
        filters=(
            ValueSetFilter("concept", "is-a", "123"),
            ValueSetFilter("display", "regex", "^A"),
        ),
    )
    assert rule.to_fsh() == '* exclude codes from system $sct where concept is-a #123 and display regex "^A"'


def test_mapping_rule():
    assert MappingRule(path="code", map="OBX-3", comment="Code", language="text/plain").to_fsh() == (
        '* code -> "OBX-3" "Code" #text/plain'
    )


class TestExportables:
    def test_alias(self):
        assert ExportableAlias(alias="$sct", url="http://snomed.info/sct").to_fsh() == (
            "Alias: $sct = http://snomed.info/sct"
        )

    def test_instance(self):
        instance = ExportableInstance(
            name="Inline1",
            instance_of="Patient",
            usage=InstanceUsage.INLINE,
            rules=[AssignmentRule(path="active", value=True)],
        )
        assert instance.to_fsh() == (
            "Instance: Inline1\nInstanceOf: Patient\nUsage: #inline\n* active = true"
        )

    def test_invariant(self):
        invariant = ExportableInvariant(
            name="inv-1", description="Must hold", severity="error", expression="code.exists()"
        )
        assert invariant.to_fsh() == (
            "Invariant: inv-1\n"
            'Description: "Must hold"\n'
            "Severity: #error\n"
            'Expression: "code.exists()"'
        )

    def test_mapping(self):
        mapping = ExportableMapping(
            name="MyMapping",
            id="v2",
            source="MyProfile",
            target="http://hl7.org/v2",
            rules=[MappingRule(path="code", map="OBX-3")],
        )
        assert mapping.to_fsh() == (
            "Mapping: MyMapping\n"
            "Id: v2\n"
            "Source: MyProfile\n"
            'Target: "http://hl7.org/v2"\n'
            '* code -> "OBX-3"'
        )
