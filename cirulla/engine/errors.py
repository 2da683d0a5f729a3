"""Engine exceptions."""


class InvalidOperationError(ValueError):
    """A state mutation that breaks an engine invariant (programmer error)."""


class DealError(RuntimeError):
    """No deal with fewer than two Aces on the table could be produced."""
