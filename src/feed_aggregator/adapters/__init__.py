"""Adapters for sources and feed output."""
