"""
Exceptions raised by the minefield engine.
"""


class PersistenceError(Exception):
    """A board snapshot could not be written or read back."""


class SaveNotFoundError(PersistenceError):
    """No saved game exists at the configured location."""
