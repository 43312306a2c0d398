"""
External-facing services: round state API and Solana ledger access.
"""
