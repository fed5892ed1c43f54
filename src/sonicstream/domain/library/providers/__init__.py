"""Upstream adapters for playlist resolution."""
