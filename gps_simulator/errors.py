"""
Exceptions raised by the simulator.
"""


class ConfigurationError(ValueError):
    """Simulation cannot start with the given routes, cars or channels."""


class PublishError(RuntimeError):
    """A single location event could not be handed to its channel."""
