# src/gravbasin/runtime/jit.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

from numba import njit

# JIT toggle applied *only here*.
# With jit=False the original Python callables are returned untouched.

__all__ = ["JittedCallable", "jit_compile"]


@dataclass(frozen=True)
class JittedCallable:
    fn: Callable
    jitted: bool
    component: str | None = None


def jit_compile(fn: Callable, *, jit: bool = True, component: str | None = None) -> JittedCallable:
    """
    Centralized JIT compilation with consistent error handling.

    Behavior:
        - If jit=False: returns original Python function
        - If jit=True: compiles with numba in nopython mode, releasing the GIL
          so row kernels can run on a thread pool

    Raises:
        RuntimeError: If numba compilation fails
    """
    if not jit:
        return JittedCallable(fn=fn, jitted=False, component=component)
    try:
        compiled = njit(cache=False, nogil=True)(fn)
    except Exception as e:
        raise RuntimeError(
            f"JIT compilation with numba failed for '{component or fn.__name__}': "
            f"{type(e).__name__}: {e}"
        ) from e
    return JittedCallable(fn=compiled, jitted=True, component=component)
