"""Thought Sort HTTP API."""
