"""
Exceptions raised by the database layer.
"""


class DuplicateEntryError(Exception):
    """
    Raised when a write would violate a uniqueness rule.

    Attributes:
        resource: Human-readable name of the duplicated resource
    """

    def __init__(self, resource: str, message: str):
        super().__init__(message)
        self.resource = resource
        self.message = message
