"""Protocol-specific implementations."""
