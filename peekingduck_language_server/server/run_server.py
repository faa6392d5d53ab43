#!/usr/bin/env python3

"""CLI entry point of the PeekingDuck language server."""

import argparse
import logging
from typing import List, Optional

from ..config import ServerConfig, server_config
from .server import PeekingDuckLanguageServer

logger = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='peekingduck-language-server',
        description='Language server for PeekingDuck pipeline files',
    )
    transport = parser.add_mutually_exclusive_group()
    transport.add_argument(
        '--stdio',
        action='store_true',
        help='Communicate over stdin/stdout (default)',
    )
    transport.add_argument(
        '--tcp',
        action='store_true',
        help='Listen on a TCP socket instead of stdio',
    )
    parser.add_argument('--host', default='127.0.0.1', help='TCP host (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=2087, help='TCP port (default: 2087)')
    parser.add_argument(
        '--log-level',
        choices=LOG_LEVELS,
        default=None,
        help=f'Logging level (default: {server_config.log_level})',
    )
    parser.add_argument('--log-file', default=None, help='Also write logs to this file')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the language server CLI."""
    args = build_arg_parser().parse_args(argv)

    config = ServerConfig(
        log_level=args.log_level or server_config.log_level,
        log_file=args.log_file or server_config.log_file,
        validation_delay_ms=server_config.validation_delay_ms,
        max_problems=server_config.max_problems,
    )
    config.set_logging()

    ls = PeekingDuckLanguageServer(config)
    if args.tcp:
        logger.info(f"Starting PeekingDuck Language Server on {args.host}:{args.port}")
        ls.start_tcp(args.host, args.port)
    else:
        logger.info("Starting PeekingDuck Language Server over stdio")
        ls.start_io()


if __name__ == '__main__':
    main()
