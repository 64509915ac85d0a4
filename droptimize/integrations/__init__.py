"""External services consulted by the caller, never by the geometric core."""
