"""Error taxonomy for the allocator."""


class AllocatorError(Exception):
    """Base class for allocator errors."""


class InvalidDrainConfig(AllocatorError, ValueError):
    """Drain source/target are identical or missing from the vault or allocation."""


class UnsupportedModel(AllocatorError, ValueError):
    """Interest rate model variant is not one of the recognized ones."""


class UnsupportedChainError(AllocatorError, ValueError):
    """Chain id has no known network mapping."""


class ConfigurationError(AllocatorError, ValueError):
    """Allocator was wired without something the selected mode needs."""
