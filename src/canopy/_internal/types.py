"""Shared type aliases used across canopy modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route or page handler: user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
