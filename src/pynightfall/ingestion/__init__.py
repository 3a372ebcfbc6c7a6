"""Ingestion layer.

Adapters that turn raw frames received from the robot into decoded
frames for the state layer.
"""

__all__: list[str] = []
