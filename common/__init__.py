"""Shared helpers for the knife command line."""
