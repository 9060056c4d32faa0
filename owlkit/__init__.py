"""Helpers for cross-chain bridge services: amounts, addresses, logging and transaction bodies."""

__version__ = "0.1.0"