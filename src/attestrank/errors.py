"""Exception hierarchy for attestrank."""


class AttestRankError(Exception):
    """Base class for all attestrank errors."""


class InvalidAccountError(AttestRankError, ValueError):
    """An account identifier is not a 20-byte address."""


class ConfigError(AttestRankError):
    """Operator configuration could not be parsed or validated."""


class AllocationInvariantError(AttestRankError):
    """Allocated points exceed the pool. Indicates an allocator defect."""

    def __init__(self, distributed: int, pool: int):
        self.distributed = distributed
        self.pool = pool
        super().__init__(
            f"CRITICAL: over-assigned points! Assigned: {distributed}, Pool: {pool}"
        )
