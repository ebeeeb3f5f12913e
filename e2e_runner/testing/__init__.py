"""Helpers for testing the runner and code built on it."""
