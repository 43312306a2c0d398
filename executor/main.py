"""
Main entry point for the ORE automation executor.

Every tick:
- Fetch the current round; do nothing unless it is active
- Discover automation accounts naming this executor
- For each one, checkpoint and/or deploy as needed
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import httpx
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment

from executor.errors import SigningUnavailable
from executor.models.state import ExecutorState
from executor.scheduler import TickScheduler
from executor.services.discovery import AccountDiscovery
from executor.services.round_state import RoundStateService
from executor.services.submitter import Submitter
from executor.services.transactions import TransactionBuilder
from executor.utils.env import (
    COMMITMENT,
    CONFIRM_POLL_SECONDS,
    DRY_RUN,
    EXECUTOR_SECRET_BASE58,
    LOG_FILE,
    LOG_LEVEL,
    ROUND_STATE_TIMEOUT,
    ROUND_STATE_URL,
    RPC_URL,
    SEND_MAX_RETRIES,
    SKIP_PREFLIGHT,
    TICK_INTERVAL_MS,
)
from executor.utils.keys import load_executor_keypair

# Configure logging
logging.basicConfig(
    level=getattr(logging, str(LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.FileHandler(LOG_FILE), logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")


def _is_set(value) -> bool:
    """Return True if value is set and usable (not None, 'None', or empty string)."""
    if value is None:
        return False
    s = str(value).strip()
    return s not in ("", "None", "none")


def validate_config(config: dict) -> None:
    """
    Validate required config after assembly. Exit with code 1 if any check fails.
    """
    errors: List[str] = []

    if not _is_set(config.get("executor_secret")):
        errors.append("Missing EXECUTOR_SECRET_BASE58 env var")

    url = config.get("rpc_url")
    if not _is_set(url):
        errors.append("RPC_URL must be set")
    elif not (str(url).startswith("http://") or str(url).startswith("https://")):
        errors.append("RPC_URL must start with http:// or https://")

    round_url = config.get("round_state_url")
    if not _is_set(round_url) or not str(round_url).startswith(("http://", "https://")):
        errors.append("ROUND_STATE_URL must be an http(s) URL")

    if config.get("commitment") not in COMMITMENT_LEVELS:
        errors.append(f"COMMITMENT must be one of {', '.join(COMMITMENT_LEVELS)}")

    if config.get("interval_ms", 0) <= 0:
        errors.append("TICK_INTERVAL_MS must be positive")

    if config.get("max_retries", 0) < 0:
        errors.append("SEND_MAX_RETRIES must not be negative")

    if errors:
        logger.error("Config validation failed:")
        for e in errors:
            logger.error(f"  - {e}")
        logger.error("Please set required environment variables and restart.")
        sys.exit(1)


def get_config(argv: Optional[List[str]] = None) -> dict:
    """Load configuration from environment and arguments."""
    parser = argparse.ArgumentParser(description="ORE automation executor")

    parser.add_argument(
        "--rpc-url",
        type=str,
        default=RPC_URL,
        help=f"Solana RPC endpoint. Default: {RPC_URL}",
    )
    parser.add_argument(
        "--round-state-url",
        type=str,
        default=ROUND_STATE_URL,
        help=f"ORE round state API. Default: {ROUND_STATE_URL}",
    )
    parser.add_argument(
        "--commitment",
        type=str,
        default=COMMITMENT,
        choices=COMMITMENT_LEVELS,
        help=f"Commitment for reads and confirmation. Default: {COMMITMENT}",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=TICK_INTERVAL_MS,
        help=f"Tick interval in milliseconds. Default: {TICK_INTERVAL_MS}",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=SEND_MAX_RETRIES,
        help=f"Send retries per transaction. Default: {SEND_MAX_RETRIES}",
    )
    parser.add_argument(
        "--skip-preflight",
        action="store_true",
        default=SKIP_PREFLIGHT,
        help="Skip preflight simulation when sending",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=DRY_RUN,
        help="Build and sign transactions without sending them",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single tick and exit",
    )

    args = parser.parse_args(argv)

    return {
        "rpc_url": args.rpc_url,
        "round_state_url": args.round_state_url,
        "round_state_timeout": ROUND_STATE_TIMEOUT,
        "commitment": args.commitment,
        "interval_ms": args.interval_ms,
        "max_retries": args.max_retries,
        "skip_preflight": args.skip_preflight,
        "confirm_poll_seconds": CONFIRM_POLL_SECONDS,
        "dry_run": args.dry_run,
        "once": args.once,
        "executor_secret": EXECUTOR_SECRET_BASE58,
    }


async def run_executor(config: dict) -> None:
    """
    Run the executor until interrupted (or for one tick with --once).

    Args:
        config: Configuration dictionary
    """
    try:
        keypair = load_executor_keypair(config.get("executor_secret"))
    except SigningUnavailable as e:
        logger.error(f"Cannot load executor key: {e}")
        sys.exit(1)

    logger.info("=" * 80)
    logger.info("STARTING ORE AUTOMATION EXECUTOR")
    logger.info("=" * 80)
    logger.info(f"RPC URL: {config['rpc_url']}")
    logger.info(f"Round state: {config['round_state_url']}")
    logger.info(f"Executor: {keypair.pubkey()}")
    logger.info(f"Commitment: {config['commitment']}")
    if config["dry_run"]:
        logger.info("Dry run: transactions will be built and signed but not sent")

    commitment = Commitment(config["commitment"])
    client = AsyncClient(config["rpc_url"], commitment=commitment)
    http_client = httpx.AsyncClient()
    state = ExecutorState()

    scheduler = TickScheduler(
        round_state=RoundStateService(
            config["round_state_url"],
            timeout=config["round_state_timeout"],
            client=http_client,
        ),
        discovery=AccountDiscovery(client, commitment=commitment),
        builder=TransactionBuilder(client, keypair, commitment=commitment),
        submitter=Submitter(
            client,
            commitment=commitment,
            max_retries=config["max_retries"],
            skip_preflight=config["skip_preflight"],
            poll_seconds=config["confirm_poll_seconds"],
        ),
        executor=keypair.pubkey(),
        state=state,
        interval_seconds=config["interval_ms"] / 1000,
        dry_run=config["dry_run"],
    )

    try:
        if config["once"]:
            report = await scheduler.tick()
            if report is not None:
                logger.info(f"Single tick finished - {report.summary()}")
        else:
            await scheduler.run_forever()
    finally:
        await http_client.aclose()
        await client.close()
        logger.info("Connections closed")
        logger.info(f"Executor state: {state.summary()}")


def main(argv: Optional[List[str]] = None):
    """Main executor entry point."""
    try:
        config = get_config(argv)
        validate_config(config)
        asyncio.run(run_executor(config))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received. Shutting down executor...")
    except Exception as e:
        logger.error(f"Fatal error in executor bot: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
