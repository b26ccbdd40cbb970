"""Test helpers for vroomctl.

- FakeRuntime: in-memory container runtime that records commands
"""

from .fake_runtime import FakeRuntime

__all__ = [
    "FakeRuntime",
]
