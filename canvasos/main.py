#!/usr/bin/env python3
"""
CanvasOS - main entry point.

Starts a terminal on the shared virtual filesystem.

Usage:
    canvasos [--config PATH] [--store PATH] [--headless]

With ``--headless`` the shell reads commands from stdin, prints their
output and exits at end of input, without prompts or banner.
"""

import argparse
import sys
from typing import List, Optional, TextIO

from canvasos.core.config_loader import Config, ConfigLoader
from canvasos.exceptions import CanvasOSError
from canvasos.filesystem import (
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    PersistenceAdapter,
    TreeStore,
)
from canvasos.logger import Logger, LogLevel, get_logger
from canvasos.shell import Shell


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='canvasos',
        description='Terminal for the CanvasOS virtual filesystem.',
    )
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument('--store', help='JSON file holding the saved tree')
    parser.add_argument(
        '--headless', action='store_true',
        help='read commands from stdin instead of an interactive prompt'
    )
    return parser.parse_args(argv)


def load_config(config_path: Optional[str]) -> Config:
    """Load ``config_path`` if given, otherwise use the defaults."""
    loader = ConfigLoader()
    if config_path:
        return loader.load(config_path)
    return loader.config


def build_store(config: Config) -> TreeStore:
    """
    Open the tree described by the filesystem settings.

    Without ``store_path`` the snapshot lives in memory and is lost on
    exit.
    """
    fs_config = config.filesystem

    if fs_config.store_path:
        kv_store = JsonFileKeyValueStore(fs_config.store_path)
    else:
        kv_store = MemoryKeyValueStore()

    adapter = PersistenceAdapter(
        kv_store,
        key=fs_config.storage_key,
        strict=fs_config.strict_saves,
    )
    return TreeStore.from_persistence(adapter)


def run_headless(store: TreeStore, stream: Optional[TextIO] = None) -> int:
    """
    Run every line of ``stream`` (stdin by default) through one shell
    session.

    Returns:
        Exit code
    """
    shell = Shell(store)
    for line in stream or sys.stdin:
        shell.execute(line.rstrip('\n'))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for CanvasOS.

    Startup sequence:
    1. Load configuration
    2. Initialize logging
    3. Load the tree
    4. Run the shell
    """
    args = _parse_args(argv)

    try:
        config = load_config(args.config)
    except CanvasOSError as e:
        print(f"canvasos: {e.message}", file=sys.stderr)
        return 1

    if args.store:
        ConfigLoader().set('filesystem.store_path', args.store)
        config = ConfigLoader().config

    Logger.initialize(
        level=LogLevel.from_name(config.logging.level),
        log_file=config.logging.log_file,
        console_output=config.logging.console_output,
    )
    logger = get_logger('main')

    try:
        store = build_store(config)
    except CanvasOSError as e:
        logger.error(f"Cannot open filesystem: {e.message}", context=e.context)
        print(f"canvasos: {e.message}", file=sys.stderr)
        return 1

    logger.info(
        "Filesystem ready",
        context={'key': config.filesystem.storage_key,
                 'store': config.filesystem.store_path or 'memory'}
    )

    if args.headless:
        return run_headless(store)

    shell = Shell(store)
    try:
        shell.run()
    except KeyboardInterrupt:
        print("\n\nInterrupted")

    return 0


if __name__ == '__main__':
    sys.exit(main())
