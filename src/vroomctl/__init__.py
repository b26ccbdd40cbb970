"""vroomctl - start and stop a local VROOM routing-engine container."""

__version__ = "0.1.0"
