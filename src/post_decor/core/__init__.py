"""Configuration, logging and identity helpers."""
