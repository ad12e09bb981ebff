"""Messaging core: presence, membership, messages, counters, typing and delivery."""
