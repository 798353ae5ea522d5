"""Configuration loading shared across knife entry points."""
