from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Cluster and session facts cost formulas scale by."""

    alive_backend_number: int
    degree_of_parallelism: int = 1

    def __post_init__(self) -> None:
        if self.alive_backend_number < 0:
            raise ValueError("alive_backend_number cannot be negative.")
        if self.degree_of_parallelism < 1:
            raise ValueError("degree_of_parallelism must be at least 1.")


_current_runtime: ContextVar[RuntimeContext | None] = ContextVar("optistats_runtime_context", default=None)


def get_runtime_context() -> RuntimeContext:
    runtime = _current_runtime.get()
    if runtime is None:
        raise RuntimeError("No runtime context is installed for cost estimation.")
    return runtime


@contextmanager
def use_runtime_context(runtime: RuntimeContext) -> Iterator[RuntimeContext]:
    token = _current_runtime.set(runtime)
    try:
        yield runtime
    finally:
        _current_runtime.reset(token)
