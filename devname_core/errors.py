"""
errors.py - Exception classes for the device rename engine
"""

from typing import List, Optional, Tuple


class RenamerError(Exception):
    """Base exception for rename engine errors."""

    pass


class ConfigLoadError(RenamerError):
    """Configuration export cannot be read or parsed."""

    pass


class ResolutionError(RenamerError):
    """No base identifier can be found in the configuration export."""

    pass


class RuleLoadError(RenamerError):
    """Malformed transformation rule document."""

    pass


class StorageError(RenamerError):
    """Registry database access failed."""

    def __init__(self, message: str, entry_key: Optional[str] = None):
        super().__init__(message)
        self.entry_key = entry_key


class MutationError(RenamerError):
    """The rename transaction was aborted and rolled back."""

    def __init__(self, message: str, entry_key: Optional[str] = None):
        super().__init__(message)
        self.entry_key = entry_key


class MissingEntryError(RenamerError):
    """Entry keys absent from the registry."""

    def __init__(self, entry_keys: List[str]):
        super().__init__(f"{len(entry_keys)} entry key(s) not found in registry: {', '.join(entry_keys[:5])}")
        self.entry_keys = list(entry_keys)


class CollisionError(RenamerError):
    """Entries dropped because they resolved to the same name."""

    def __init__(self, collisions: List[Tuple[str, str, str]]):
        first = collisions[0]
        super().__init__(
            f"{len(collisions)} name collision(s), first: {first[1]} and {first[2]} -> {first[0]!r}"
        )
        self.collisions = list(collisions)
