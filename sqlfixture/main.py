"""Command-line entry point: load SQL fixture files into a database."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from sqlfixture.config import configure_logging, get_logger, settings
from sqlfixture.db import Driver
from sqlfixture.errors import ModuleError

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load SQL fixture scripts into a test database")
    parser.add_argument("files", nargs="+", help="SQL script files, loaded in order")
    parser.add_argument("--dsn", help="Database DSN (default: DB_DSN)")
    parser.add_argument("--user", help="Database user (default: DB_USER)")
    parser.add_argument("--password", help="Database password (default: DB_PASSWORD)")
    parser.add_argument(
        "--cleanup", action="store_true", help="Drop all tables before loading"
    )
    return parser


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Load the given scripts and print a JSON summary.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    overrides = {
        name: value
        for name, value in (("dsn", args.dsn), ("user", args.user), ("password", args.password))
        if value is not None
    }
    run_settings = settings.model_copy(
        update={"database": settings.database.model_copy(update=overrides)}
    )

    loaded: list[str] = []
    try:
        with Driver.from_settings(run_settings) as driver:
            if args.cleanup:
                driver.cleanup()
            for name in args.files:
                path = Path(name)
                logger.info("Loading fixture", path=str(path))
                driver.load(path.read_text(encoding="utf-8").splitlines())
                loaded.append(str(path))
    except (ModuleError, OSError) as e:
        logger.error("Fixture load failed", error=str(e), loaded=loaded)
        print(json.dumps({"success": False, "loaded": loaded, "error": str(e)}, indent=2))
        return 1

    print(json.dumps({"success": True, "loaded": loaded}, indent=2))
    return 0


def main() -> int:
    configure_logging()
    return run()


if __name__ == "__main__":
    sys.exit(main())
