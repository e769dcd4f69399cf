"""Persistence-facing repositories."""
