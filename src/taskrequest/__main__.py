"""Create one ARXS task request from the command line. Use --help for usage."""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from config.config import ArxsConfig, load_config
from core.errors.exceptions import ConfigurationError, PipelineError
from core.logging.setup import setup_logging
from core.logging.utilities import log_exception
from core.utils.json_serializers import json_serializer
from core.utils.run_id import generate_run_id
from taskrequest.runner import TaskRequestPipeline
from taskrequest.schemas.task_request import TaskRequestInput

# Project root directory (where .env file is located)
# __main__.py is at src/taskrequest/__main__.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="arxs-taskrequest",
        description="Resolve an employee, a kind/type classification and an equipment "
        "on the ARXS platform and submit a task request referencing them.",
    )
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--user-name", help="userName of the notifying employee")
    parser.add_argument("--module", help="Platform module (e.g. NotificationDefect)")
    parser.add_argument("--kind", help="Exact name of the kind")
    parser.add_argument("--type", dest="type_name", help="Exact name of the type")
    parser.add_argument("--subject", help="uniqueNumber of the equipment")
    parser.add_argument("--image", type=Path, help="Optional image to upload and attach")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and compose, print the body, do not upload or submit",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--log-dir", type=Path, help="Write rotating log files here")
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=os.getenv("JSON_LOGS", "true").lower() in ("true", "1", "yes"),
        help="JSON format for file logs (default from JSON_LOGS, true)",
    )
    return parser.parse_args(argv)


def build_request(args: argparse.Namespace, config: ArxsConfig) -> TaskRequestInput:
    """Merge CLI flags over the config's ``arxs.request`` section."""
    defaults = config.request or {}

    def pick(cli_value: Any, key: str) -> Any:
        return cli_value if cli_value is not None else defaults.get(key)

    try:
        return TaskRequestInput(
            user_name=pick(args.user_name, "user_name"),
            module=pick(args.module, "module"),
            kind_name=pick(args.kind, "kind"),
            type_name=pick(args.type_name, "type"),
            subject_unique_number=pick(args.subject, "subject"),
            image_path=pick(args.image, "image"),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid task request input: {e}", cause=e) from e


def main(argv: list[str] | None = None) -> int:
    load_dotenv(PROJECT_ROOT / ".env")
    args = parse_args(argv)

    run_id = generate_run_id("taskrequest")
    setup_logging(
        log_dir=args.log_dir,
        json_format=args.json_logs,
        console_level=getattr(logging, args.log_level),
        run_id=run_id,
    )

    try:
        config = load_config(args.config)
        config.validate()
        request = build_request(args, config)
        pipeline = TaskRequestPipeline(config, run_id=run_id)
    except ConfigurationError as e:
        log_exception(logger, e, "Configuration error", include_traceback=False)
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        result = asyncio.run(pipeline.run(request, dry_run=args.dry_run))
    except PipelineError as e:
        log_exception(logger, e, "Task request run failed")
        print(f"Task request failed at stage '{e.stage}': {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(json.dumps(result, indent=2, ensure_ascii=False, default=json_serializer))
    return 0


if __name__ == "__main__":
    sys.exit(main())
