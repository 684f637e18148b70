"""
Main entry point for propctl.

    propctl <prop> [--mock]

Each prop also has its own console script (propctl-simon, ...).
"""

import argparse
import asyncio
import logging
import sys

from propctl.props import PROPS


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_parser(prop: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=f"propctl-{prop}" if prop else "propctl",
        description="Escape-room prop controller",
    )
    if prop is None:
        parser.add_argument("prop", choices=sorted(PROPS), help="prop to run")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="simulate all hardware and accept keyboard input from the browser",
    )
    return parser


def main(argv: list[str] | None = None, prop: str | None = None) -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    from propctl.config import get_settings
    from propctl.errors import ConfigurationError
    from propctl.runner import run_prop

    args = build_parser(prop).parse_args(argv)
    prop = prop or args.prop

    # Load environment variables
    load_dotenv()

    try:
        settings = get_settings()
    except (ConfigurationError, ValueError) as e:
        setup_logging()
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        sys.exit(2)

    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info(f"propctl starting {prop}{' (mock mode)' if args.mock else ''}...")

    try:
        asyncio.run(run_prop(prop, settings, mock=args.mock))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info(f"propctl {prop} stopped")


def simon() -> None:
    main(prop="simon")


def world_map() -> None:
    main(prop="world-map")


def gadget_code() -> None:
    main(prop="gadget-code")


def vehicle() -> None:
    main(prop="vehicle")


def missile() -> None:
    main(prop="missile")


def screen_villain() -> None:
    main(prop="screen-villain")


def screen_right() -> None:
    main(prop="screen-right")


def screen_immersion() -> None:
    main(prop="screen-immersion")


if __name__ == "__main__":
    main()
