import argparse
import logging
from pathlib import Path

from .data.config import OutputStyle
from .output import output

parser = argparse.ArgumentParser(description="Convert FHIR definitions to FHIR Shorthand")

subparsers = parser.add_subparsers(dest="cmd", required=True)

parser_export = subparsers.add_parser("export", help="generate FSH files")
parser_export.add_argument(
    "--input-dir",
    type=Path,
    required=True,
    help="The directory containing the FHIR JSON definitions",
)
parser_export.add_argument(
    "--out-dir",
    type=Path,
    required=True,
    help="The directory the FSH files are written to",
)
parser_export.add_argument(
    "--config",
    type=Path,
    required=True,
    help="The sushi-config.yaml (or JSON) providing the canonical",
)
parser_export.add_argument(
    "--style",
    choices=[style.value for style in OutputStyle],
    default=None,
    help="How definitions are grouped into files (default: group-by-fsh-type)",
)
parser_export.add_argument(
    "--dependency-dir",
    type=Path,
    action="append",
    default=[],
    help="Directory with definitions of dependencies, used to resolve parents",
)
parser_export.add_argument(
    "--log-level",
    choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    default="INFO",
)

args = parser.parse_args()
if args.cmd == "export":
    logging.basicConfig(level=args.log_level, format="%(levelname)s - %(message)s")
    error = output(args.input_dir, args.out_dir, args.config, args.style, args.dependency_dir)
    if error is not None:
        parser.exit(1, f"{error.error}\n")
else:
    parser.print_help()
