"""Errors raised by repository implementations."""


class StoreError(Exception):
    """The persistent store rejected or failed a read or write.

    Implementations roll back before raising, so a failed mutation leaves
    no partial state behind.
    """
