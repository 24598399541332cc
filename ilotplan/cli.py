"""Command-line entry point: analyze a drawing and print the layout JSON."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .dxf_parser.reader import read_drawing_entities
from .errors import IlotPlanError
from .layout.engine import LayoutEngine
from .layout.types import LayoutConfiguration
from .settings import EngineSettings

logger = logging.getLogger(__name__)


def _load_config(value: Optional[str]) -> Dict[str, Any]:
    """Configuration from a JSON file path or an inline JSON object."""
    if not value:
        return {}
    if value.lstrip().startswith("{"):
        return json.loads(value)
    path = Path(value)
    if path.is_file():
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return json.loads(value)


def _load_entities(drawing: str, apply_units: bool) -> List[Dict[str, Any]]:
    """Raw entities from a DXF drawing or a JSON entity list."""
    path = Path(drawing)
    if path.suffix.lower() == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data.get("entities", []) if isinstance(data, dict) else data
    return read_drawing_entities(path, apply_units=apply_units)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ilotplan",
        description="Classify floor-plan zones and lay out ilots and corridors",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze a DXF drawing or JSON entity list")
    analyze.add_argument("drawing", help="Path to a .dxf drawing or a .json entity list")
    analyze.add_argument(
        "--config",
        default=None,
        help="Layout configuration as a JSON file path or inline JSON object",
    )
    analyze.add_argument("--seed", type=int, default=None, help="Random seed for placement")
    analyze.add_argument("--output", default=None, help="Write the result JSON to this path")
    analyze.add_argument(
        "--no-units",
        action="store_true",
        help="Keep drawing units instead of scaling by $INSUNITS",
    )
    return parser


def analyze(args: argparse.Namespace, settings: EngineSettings) -> Dict[str, Any]:
    data = _load_config(args.config)
    if args.seed is not None:
        data["seed"] = args.seed
    config = settings.apply(LayoutConfiguration.from_dict(data))

    entities = _load_entities(args.drawing, apply_units=not args.no_units)
    logger.info(f"Loaded {len(entities)} entities from {args.drawing}")

    return LayoutEngine().run(entities, config).to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    settings = EngineSettings.from_env()

    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args = build_parser().parse_args(argv)

    try:
        result = analyze(args, settings)
    except FileNotFoundError as e:
        logger.error(f"Drawing not found: {e}")
        return 1
    except (IlotPlanError, ValueError, OSError) as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    payload = json.dumps(result, indent=2)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        logger.info(f"Result written to {args.output}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
