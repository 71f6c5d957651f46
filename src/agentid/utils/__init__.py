"""Shared utilities for agentid."""
