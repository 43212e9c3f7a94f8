#!/usr/bin/env python3
"""
ClassWatch - watch the shopping cart for classes that open up
"""

import sys
import os
import argparse
import logging

import colorama
from colorama import Fore, Style

from classwatch_config import load_config, load_credentials
from classwatch_errors import ConfigurationError
from classwatch_runner import ClassWatchRunner
from portal_session import PortalSession


class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA + Style.BRIGHT
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


def setup_logging(verbose: bool = False, debug: bool = False, quiet: bool = False):
    """Set up console + file logging"""
    if debug:
        level = logging.DEBUG
        log_format = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    elif verbose:
        level = logging.INFO
        log_format = '%(asctime)s - %(levelname)s - %(message)s'
    elif quiet:
        level = logging.ERROR
        log_format = '%(levelname)s - %(message)s'
    else:
        level = logging.WARNING
        log_format = '%(levelname)s - %(message)s'

    # Clear any existing handlers
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    os.makedirs('logs', exist_ok=True)

    # File handler (always debug level for logs)
    file_handler = logging.FileHandler('logs/classwatch.log')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    if verbose or debug:
        colorama.init()
        console_handler.setFormatter(ColoredFormatter(log_format))
    else:
        console_handler.setFormatter(logging.Formatter(log_format))

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=[file_handler, console_handler]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Check the portal shopping cart and email when a class opens')
    parser.add_argument('--config', type=str, default='config.json',
                       help='Path to config.json (default: config.json)')
    parser.add_argument('--headless', action='store_true',
                       help='Run browser in headless mode (no GUI)')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Log every phase of the run')
    parser.add_argument('--debug', '-d', action='store_true',
                       help='Enable debug mode with maximum detail (includes --verbose)')
    parser.add_argument('--quiet', '-q', action='store_true',
                       help='Minimal output (only errors)')
    parser.add_argument('--clear-session', action='store_true',
                       help='Delete the saved login session and exit')
    parser.add_argument('--login-only', action='store_true',
                       help='Log in (or reuse the saved session) and exit without checking the cart')
    parser.add_argument('--notify-any-change', action='store_true',
                       help='Email on every status change, not only when a class opens')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Debug mode implies verbose
    if args.debug:
        args.verbose = True
    setup_logging(verbose=args.verbose and not args.quiet, debug=args.debug and not args.quiet, quiet=args.quiet)
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        return 1
    if args.headless:
        config.headless = True
    if args.notify_any_change:
        config.notify_on_any_change = True
    credentials = load_credentials()

    session = PortalSession(
        config.portal_url,
        credentials,
        config.session_file,
        headless=config.headless,
        timeouts=config.timeouts,
    )

    if args.clear_session:
        if session.clear_saved_session():
            print("✅ Saved session cleared")
        else:
            print("ℹ️  No saved session to clear")
        return 0

    # Placeholder or missing credentials: stop before any browser work
    try:
        credentials.validate()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        return 1

    if args.login_only:
        try:
            session.establish_session()
            print("✅ Logged in, session saved")
            return 0
        except Exception as e:
            logger.error(f"❌ Login failed: {e}")
            return 1
        finally:
            session.close()

    runner = ClassWatchRunner(config, credentials, session=session)
    return 0 if runner.run() else 1


if __name__ == "__main__":
    sys.exit(main())
