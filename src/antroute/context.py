"""Ambient per-request state read by the engine.

The hosting application owns these values. Mappings only read them, at the
moment a deferred controller/action/view is resolved or a context-path
qualified URL is built.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

request_params: ContextVar[Mapping[str, Any]] = ContextVar("request_params")
context_path: ContextVar[str] = ContextVar("context_path", default="")


def current_params() -> Mapping[str, Any]:
    """Parameters of the request being handled, or an empty mapping."""
    return request_params.get({})


@contextmanager
def bind_request(params: Mapping[str, Any], path: str = "") -> Iterator[None]:
    """Expose *params* and the application *path* for the enclosed block."""
    params_token = request_params.set(params)
    path_token = context_path.set(path)
    try:
        yield
    finally:
        context_path.reset(path_token)
        request_params.reset(params_token)
