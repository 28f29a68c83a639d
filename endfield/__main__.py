import argparse
import logging
import sys
from typing import List, Optional

from endfield.config import load_config
from endfield.errors import ConfigError
from endfield.game import CheckinRunner
from endfield.notify import send_report
from endfield.transport import Transport

logger = logging.getLogger("endfield")


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Arknights: Endfield daily check-in (SKPort)")
    p.add_argument("--no-notify", action="store_true", help="Do not send the report to Discord")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    p.add_argument(
        "--min-interval",
        type=float,
        default=0.0,
        help="Minimum seconds between two requests to the same host",
    )
    args = p.parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
        logger.error(f"Configuration error: {e}")
        return 2

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    transport = Transport(timeout=args.timeout, min_interval=args.min_interval)
    runner = CheckinRunner(transport, language=config.language)
    try:
        runner.run(config.sources)
    finally:
        transport.close()

    report = runner.report
    failed = report.has_errors

    if config.discord_webhook and not args.no_notify:
        send_report(report, config.discord_webhook, config.discord_user)

    if failed:
        logger.error("One or more errors occurred.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
