"""Integrations with the record store, the code store, and mail."""
