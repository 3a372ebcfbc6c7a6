"""State layer.

This package is the single source of truth for how inbound telemetry is
merged into the canonical snapshot and how operator predictions are
layered on top of it.
"""
