"""Streaming conversation client for remote search agents."""
