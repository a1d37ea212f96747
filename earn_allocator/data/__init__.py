"""Data layer: on-chain readers."""

from .euler_reader import EulerEarnReader

__all__ = ["EulerEarnReader"]
