"""Euler Earn allocation decision engine."""

__version__ = "0.1.0"
