import json

import pytest

from fsh_exporter.data.config import ExportConfig, OutputStyle
from fsh_exporter.errors import InitializationError


def test_from_yaml(tmp_path):
    file = tmp_path / "sushi-config.yaml"
    file.write_text(
        "id: my.ig\n"
        "canonical: https://example.org/fhir\n"
        "fhirVersion: 4.0.1\n"
        "style: group-by-profile\n"
        "dependencies:\n"
        "  hl7.fhir.us.core: 6.1.0\n"
    )

    config = ExportConfig.from_file(file)

    assert config.canonical == "https://example.org/fhir"
    assert config.fhir_version == "4.0.1"
    assert OutputStyle(config.style) == OutputStyle.GROUP_BY_PROFILE
    assert config.alias is True
    assert config.dependencies == {"hl7.fhir.us.core": "6.1.0"}


def test_from_json(tmp_path):
    file = tmp_path / "config.json"
    file.write_text(json.dumps({"canonical": "https://example.org/fhir", "alias": False}))

    config = ExportConfig.from_file(file)

    assert config.alias is False
    assert config.style is None


def test_missing_canonical_is_rejected(tmp_path):
    file = tmp_path / "sushi-config.yaml"
    file.write_text("id: my.ig\n")

    with pytest.raises(InitializationError):
        ExportConfig.from_file(file)


def test_invalid_yaml_is_rejected(tmp_path):
    file = tmp_path / "sushi-config.yaml"
    file.write_text("canonical: [unclosed\n")

    with pytest.raises(InitializationError):
        ExportConfig.from_file(file)
