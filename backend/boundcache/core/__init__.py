"""Configuration, logging and test support."""
