"""Shared utilities for fileward."""
