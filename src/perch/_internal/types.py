"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Completion callback handed to actions: (error, view_path, locals)
Callback: TypeAlias = Callable[..., None]

# Controller action: (context, params, callback)
Action: TypeAlias = Callable[..., Any]

# Framework-facing request handler: (request, response, next_=None)
Handler: TypeAlias = Callable[..., None]

# Framework error continuation, receives the action error
Next: TypeAlias = Callable[[BaseException], Any]
