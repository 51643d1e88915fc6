"""Adapters: channels, probes, drivers and file I/O."""
