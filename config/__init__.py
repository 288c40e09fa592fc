"""Configuration constants and accessors."""
