"""Shared utilities: calendar day keys, logging and token decoding."""
