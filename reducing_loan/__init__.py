"""Reducing-balance loan calculator: schedule engine, CLI and exporters."""
