"""
Orchestrator helpers: the per-account automation pipeline.

The tick loop lives in executor.scheduler. This package holds the logic run
for each discovered account.

- automation: decode, load miner, decide, build, submit for one account
"""
from executor.orchestrator.automation import process_automation_account

__all__ = [
    "process_automation_account",
]
