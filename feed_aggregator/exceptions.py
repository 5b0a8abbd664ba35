"""Exceptions raised by feed_aggregator."""

from typing import List, Tuple


class CascadeError(Exception):
    """Raised after a cascading operation in which one or more children failed.

    Every child has already been visited when this is raised; ``failures``
    lists each failing child with the exception it raised.
    """

    def __init__(self, operation: str, failures: List[Tuple[object, BaseException]]):
        self.operation = operation
        self.failures = failures
        names = ", ".join(getattr(item, "name", repr(item)) for item, _ in failures)
        super().__init__(f"{operation} failed for {len(failures)} item(s): {names}")
