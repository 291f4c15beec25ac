"""Adapters — bindings to external systems (git hosts)."""
