"""Webhooks inbound de billing."""
