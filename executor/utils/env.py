"""
Environment configuration for the ORE automation executor.

Values are read once at import time; a .env file in the working directory is
loaded first. CLI flags in executor.main override these defaults.
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# Ledger
RPC_URL = os.getenv("RPC_URL", "https://api.mainnet-beta.solana.com")
COMMITMENT = os.getenv("COMMITMENT", "confirmed")
EXECUTOR_SECRET_BASE58 = os.getenv("EXECUTOR_SECRET_BASE58")

# Round state API
ROUND_STATE_URL = os.getenv("ROUND_STATE_URL", "https://ore-api.gmore.fun/v2/state")
ROUND_STATE_TIMEOUT = float(os.getenv("ROUND_STATE_TIMEOUT", 10))

# Scheduling
TICK_INTERVAL_MS = int(os.getenv("TICK_INTERVAL_MS", 2000))

# Submission
SEND_MAX_RETRIES = int(os.getenv("SEND_MAX_RETRIES", 3))
SKIP_PREFLIGHT = _as_bool(os.getenv("SKIP_PREFLIGHT", "false"))
CONFIRM_POLL_SECONDS = float(os.getenv("CONFIRM_POLL_SECONDS", 0.5))
DRY_RUN = _as_bool(os.getenv("DRY_RUN", "false"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "executor.log")
