"""Error types raised by the geometric core and its integrations."""


class InvalidArgument(ValueError):
    """Input violates a numeric precondition (speed, radius, coordinates)."""


class DirectionsError(RuntimeError):
    """External routing provider could not produce a route."""
