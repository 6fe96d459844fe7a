"""sigtrace - stochastic ray tracing of signal propagation through reflectors and foliage."""

__version__ = "0.1.0"
