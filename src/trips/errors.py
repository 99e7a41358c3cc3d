"""
Errors raised when trip requests violate invariants.

These signal malformed input from a scenario generator or a programming
error. They are never caught inside the spawner; the batch is aborted.
Trips that are merely infeasible are not errors, they become
SpawningFailure specs instead.
"""


class MalformedTripError(ValueError):
    """A trip request that can never make sense (degenerate or out of bounds)."""


class UnknownPersonError(KeyError):
    """A plan refers to a person the ledger has never seen."""


class UnfinalizableTripError(RuntimeError):
    """A spec reached finalization without any way to build legs for it."""
