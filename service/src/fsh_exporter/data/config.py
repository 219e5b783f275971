import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InitializationError

logger = logging.getLogger(__name__)


class OutputStyle(str, Enum):
    SINGLE_FILE = "single-file"
    GROUP_BY_FSH_TYPE = "group-by-fsh-type"
    FILE_PER_DEFINITION = "file-per-definition"
    GROUP_BY_PROFILE = "group-by-profile"


class ExportConfig(BaseModel):
    """Settings for one export run.

    Read from a ``sushi-config.yaml`` or an equivalent JSON file. Only the
    keys below are used; everything else in the file is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    canonical: str
    fhir_version: str | list[str] | None = Field(default=None, alias="fhirVersion")
    style: str | None = None
    alias: bool = True
    dependencies: dict[str, Any] = {}

    @staticmethod
    def from_file(file: str | Path) -> "ExportConfig":
        file = Path(file)

        try:
            content = file.read_text(encoding="utf-8")
            if file.suffix in (".yaml", ".yml"):
                config = ExportConfig.model_validate(yaml.safe_load(content) or {})
            else:
                config = ExportConfig.model_validate_json(content)

        except (ValidationError, yaml.YAMLError) as e:
            msg = f"failed to load config from {str(file)}"
            logger.error(msg)
            logger.error(e.errors() if isinstance(e, ValidationError) else str(e))
            raise InitializationError(msg)

        return config
