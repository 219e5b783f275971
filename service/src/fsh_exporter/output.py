import logging
from pathlib import Path

from .data.config import ExportConfig
from .errors import InitializationError, ResourceLoadError
from .export.fsh_exporter import FSHExporter
from .fisher import PackageFisher
from .model.error import Error as ErrorModel
from .processor import FHIRProcessor, load_resources

logger = logging.getLogger(__name__)


def write_fsh(files: dict[str, str], out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (out_dir / name).write_text(content + "\n", encoding="utf-8")


def output(
    input_dir: Path,
    out_dir: Path,
    config_file: Path,
    style: str | None = None,
    dependency_dirs: list[Path] | None = None,
):
    print("Generating FSH files...")

    try:
        config = ExportConfig.from_file(config_file)
        resources = load_resources(input_dir)

        fisher = PackageFisher(resources)
        for dependency_dir in dependency_dirs or []:
            for definition in load_resources(dependency_dir):
                fisher.add(definition)

        fsh_package = FHIRProcessor(fisher, config).process(resources)
        files = FSHExporter(fsh_package).export(style or config.style)
        write_fsh(files, Path(out_dir))

    except (InitializationError, ResourceLoadError, FileNotFoundError) as e:
        logger.error(str(e))
        return ErrorModel.from_except(e)

    print(f"Wrote {len(files)} files to {out_dir}")
