"""
sourcify-extractor CLI - copy verified contracts from Sourcify to eth-bytecode-db
"""

import argparse
import asyncio
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from sourcify_extractor.config import Settings, describe_settings, load_settings
from sourcify_extractor.core import orchestrator
from sourcify_extractor.data.models import RunSummary
from sourcify_extractor.exceptions import ConfigurationError, WorkerCrashedError
from sourcify_extractor.utils.logger import get_logger, setup_logger

logger = get_logger('cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sourcify-extractor',
        description='Submit contracts verified on Sourcify to eth-bytecode-db',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug output')
    parser.add_argument('--env-file', help='Path of a .env file to load before reading settings')
    parser.add_argument('--chain', dest='chains', type=int, action='append', metavar='CHAIN_ID',
                        help='Chain id to extract; repeat to extract several (overrides configured chains)')
    parser.add_argument('--json-logs', action='store_true', default=None, help='Emit logs as JSON')
    parser.add_argument('--log-file', help='Also write logs to this file')
    return parser


def setup_logging(settings: Settings, verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else settings.log_level.value
    setup_logger(log_level=level, log_file=log_file, json_format=settings.json_logs)


async def run_extraction(settings: Settings) -> RunSummary:
    """Run the orchestrator with the default executor sized by ``n_threads``."""
    loop = asyncio.get_running_loop()
    executor = ThreadPoolExecutor(max_workers=settings.n_threads, thread_name_prefix='extractor')
    loop.set_default_executor(executor)
    return await orchestrator.run(settings)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the sourcify-extractor CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.chains:
        overrides['chains'] = args.chains
    if args.json_logs:
        overrides['json_logs'] = True

    try:
        settings = load_settings(env_file=args.env_file, **overrides)
    except ConfigurationError as e:
        # Logging is not configured yet; report straight to stderr.
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings, verbose=args.verbose, log_file=args.log_file)
    logger.debug("Settings: %s", describe_settings(settings))
    if settings.create_database or settings.run_migrations:
        logger.info(
            "Database provisioning requested (create_database=%s, run_migrations=%s); "
            "left to the verification service",
            settings.create_database, settings.run_migrations,
        )

    try:
        asyncio.run(run_extraction(settings))
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(130)
    except WorkerCrashedError as e:
        logger.error("Extraction failed: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: {e}")
        if args.verbose:
            logger.exception("Detailed error:")
        sys.exit(1)


if __name__ == '__main__':
    main()
