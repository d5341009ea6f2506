from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pechkin.config import DEFAULT_TABLE, ConfigError, load_config
from pechkin.dispatcher import Dispatcher
from pechkin.models import DispatchConfig
from pechkin.validate import validate_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - [{table}] %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pechkin",
        usage="pechkin [options] attachment_file",
        description="Send a mail notification, optionally with the given file attached.",
        add_help=False,
    )
    parser.add_argument("-?", "--help", action="help", help="Help screen")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug flag")
    parser.add_argument(
        "-c",
        "--config",
        default="",
        help="Config file name, extension optional (default /etc/pechkin.toml, ./pechkin.toml)",
    )
    parser.add_argument("-t", "--table", default=DEFAULT_TABLE, help="Config section(table) name")
    parser.add_argument("-m", "--mailto", default="", help="Mail to address")
    parser.add_argument("-s", "--sleep", type=_non_negative_int, default=0, help="Sleep time (secs)")
    parser.add_argument("attachment_file", nargs="?", default="", help="File name to notify about")
    return parser


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("sleep must be >= 0")
    return parsed


def setup_logging(log_file: Path | None, *, table: str, debug: bool = False) -> None:
    """Send log records to ``log_file`` (appending) or to stdout."""
    if log_file is not None:
        try:
            handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Error opening file: {exc}") from exc
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(logging.Formatter(LOG_FORMAT.format(table=table)))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=[handler],
        force=True,
    )


def load_dispatch_config(args: argparse.Namespace) -> DispatchConfig:
    config = load_config(args.config or None, args.table, mail_to=args.mailto or None)
    return validate_config(config)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_dispatch_config(args)
        setup_logging(config.log_file, table=args.table, debug=args.debug)
    except ConfigError as exc:
        logging.basicConfig(format="%(levelname)s - %(message)s", force=True)
        logger.critical("%s", exc)
        return 1

    logger.debug("args %s", sys.argv if argv is None else argv)
    logger.debug("conf %s", config)

    result = Dispatcher().run(config, args.attachment_file, sleep_sec=args.sleep)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
