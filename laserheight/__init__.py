"""Serial laser rangefinder frame decoding, sensor reading and two-sensor height triangulation."""

__version__ = "0.1.0"