"""Exception types raised by the solver.

Configuration problems raise `boussinesq.params.schema.ValidationError`.
Everything raised while a run is in progress derives from SimulationError,
except output I/O which is an OSError so callers can treat it like any
other file failure.
"""


class SimulationError(RuntimeError):
    """A run cannot continue."""


class NumericalInstabilityError(SimulationError):
    """A field or derivative entry became NaN."""


class BoundaryViolationError(SimulationError):
    """A wall value departed from its Dirichlet condition."""


class OutputError(OSError):
    """A run output (snapshot or diagnostic log) could not be read or written."""


class SnapshotError(OutputError):
    """A snapshot could not be read or written in full."""
