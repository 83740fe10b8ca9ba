"""Errors raised by the optimizers."""


class OptimizeError(Exception):
    """Base class for optimizer failures."""


class InvalidProblem(OptimizeError):
    """The problem failed validation before any search started."""


class Infeasible(OptimizeError):
    """No configuration in the search space meets the target."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"No feasible solution: {reason}")


class Unsupported(OptimizeError):
    """The optimizer cannot handle this problem shape."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Unsupported problem: {reason}")
