"""
Exceptions raised by the scheduling engine and its collaborators.
"""


class SchedulerError(Exception):
    """Base class for every error raised by the simulator."""


class InvalidJob(SchedulerError, ValueError):
    """A job descriptor violates the input contract (timing, priority, id)."""


class CapacityExceeded(SchedulerError, ValueError):
    """A registry was built with more jobs than its capacity allows."""

    def __init__(self, size: int, capacity: int):
        super().__init__(f"registry holds {size} jobs, capacity is {capacity}")
        self.size = size
        self.capacity = capacity


class UnknownAlgorithm(SchedulerError, ValueError):
    """The requested scheduling algorithm is not registered."""


class InvariantViolation(SchedulerError):
    """Internal bookkeeping went wrong. Always a programming defect."""
