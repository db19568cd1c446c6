#!/usr/bin/env python3
"""
Glacier Node Manager - Interactive Launcher

An interactive menu that installs Docker when it is missing, runs the Glacier
verifier together with a Watchtower auto-update sidecar, and offers log
viewing, status checks and teardown.

Usage:
    python run.py                      # Interactive menu
    python run.py --action status      # Run a single action and exit
    python run.py --no-color           # Plain output
    python run.py -v --log-file x.log  # Debug logging to a file

Menu:
    1) Install node
    2) Show logs
    3) Check status
    4) Show update-service logs
    5) Delete node

Anything else redraws the menu. Ctrl+C exits.

Environment Variables (prefix GLACIER_, also read from .env):
    - GLACIER_VERIFIER_IMAGE: Defaults to docker.io/glaciernetwork/glacier-verifier:v0.0.3
    - GLACIER_WATCHTOWER_INTERVAL: Update poll interval in seconds (default 3600)
    - GLACIER_PRIVATE_KEY: Skips the key prompt during install
    - GLACIER_LOG_LEVEL / GLACIER_LOG_FILE / GLACIER_DEV_MODE: Logging

Why sudo?
    apt-get, systemctl and the cleanup of /var/lib/docker need root. sudo is
    expected to work without a password prompt. If running as root, sudo is
    skipped automatically.
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from glacier.core.console import Color, Console
from glacier.core.errors import StepError


# ============================================================================
# Constants
# ============================================================================

TITLE = "Glacier Node Management Menu"
RULE = "=" * 26

# (selection, label, NodeManager method)
MENU: List[Tuple[str, str, str]] = [
    ("1", "Install node", "install"),
    ("2", "Show logs", "show_logs"),
    ("3", "Check status", "check_status"),
    ("4", "Show update-service logs", "show_watchtower_logs"),
    ("5", "Delete node", "remove"),
]

ACTIONS = {
    "install": "install",
    "logs": "show_logs",
    "status": "check_status",
    "watchtower-logs": "show_watchtower_logs",
    "remove": "remove",
}

logger = logging.getLogger("glacier")


# ============================================================================
# Logging
# ============================================================================

def setup_logging(level: str, dev_mode: bool = True, log_file: Optional[str] = None) -> None:
    """Configure logging format based on dev_mode."""
    if dev_mode:
        fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    else:
        fmt = '{"time":"%(asctime)s","level":"%(levelname)s","name":"%(name)s","message":"%(message)s"}'
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=fmt,
        filename=log_file,
    )


# ============================================================================
# Menu
# ============================================================================

def show_menu(console: Console) -> None:
    console.clear()
    console.print(TITLE, Color.GREEN)
    console.print(RULE)
    for key, label, _ in MENU:
        console.print(f"{key}) {label}")
    console.print(RULE)
    console.print("Enter your choice (Ctrl+C to exit): ")


def resolve_choice(choice: str, manager) -> Optional[Callable[[], None]]:
    """Map a menu selection to a bound action, or None to redraw."""
    for key, _, method in MENU:
        if choice == key:
            return getattr(manager, method)
    return None


def menu_loop(manager, console: Console) -> None:
    """Run until Ctrl+C or end of input.

    StepError from an action propagates to the caller.
    """
    while True:
        show_menu(console)
        try:
            choice = console.ask().strip()
        except EOFError:
            logger.debug("End of input, leaving menu")
            return
        action = resolve_choice(choice, manager)
        if action is None:
            continue
        logger.debug("Menu selection %s", choice)
        action()


# ============================================================================
# Argument Parsing
# ============================================================================

def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description='Glacier Node Manager - install and manage a Glacier verifier node',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                    # Interactive menu
  python run.py --action install   # Install and exit
  python run.py --action status    # Print container status and exit
  python run.py --action remove    # Tear everything down and exit
        """
    )
    parser.add_argument(
        '--action',
        choices=sorted(ACTIONS),
        default=None,
        help='Run a single action instead of the interactive menu'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Write logs to this file instead of stderr'
    )
    return parser


# ============================================================================
# Main Entry Point
# ============================================================================

def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None, manager=None) -> int:
    """Main entry point. Returns the process exit status."""
    args = create_argument_parser().parse_args(argv)

    try:
        from glacier.config import settings
    except ValidationError as e:
        print(f"{Color.RED}Invalid configuration:{Color.RESET}\n{e}", file=sys.stderr)
        return 2

    setup_logging(
        'debug' if args.verbose else settings.log_level,
        dev_mode=settings.dev_mode,
        log_file=args.log_file or settings.log_file,
    )

    if console is None:
        console = Console(color_enabled=not args.no_color and sys.stdout.isatty())
    if manager is None:
        from glacier.services.node_manager import create_node_manager
        manager = create_node_manager(console, settings)

    try:
        if args.action:
            getattr(manager, ACTIONS[args.action])()
        else:
            menu_loop(manager, console)
    except StepError as e:
        logger.error("Stopped: %s", e)
        console.error("Error occurred. Operation stopped.")
        console.error(f"  {e}")
        return 1
    except KeyboardInterrupt:
        console.print()
        return 0
    return 0


def cli() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        # Graceful exit on Ctrl+C
        sys.exit(0)


if __name__ == '__main__':
    cli()
