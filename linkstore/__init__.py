"""Durable account-link store: local UUID identities paired with external platform ids."""

__version__ = "0.1.0"
