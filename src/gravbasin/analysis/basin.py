# src/gravbasin/analysis/basin.py
from __future__ import annotations

import time
import warnings
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Iterator, Literal

import numpy as np
from tqdm import tqdm

from gravbasin.analysis.classify import get_classify_kernel
from gravbasin.attractors import AttractorSet
from gravbasin.config import CFG_FAR_SQ, SimParams
from gravbasin.runtime.integrator import get_simulate_kernel
from gravbasin.runtime.jit import jit_compile
from gravbasin.runtime.outcomes import PixelLabel
from gravbasin.sampling import PlaneSampler

__all__ = [
    "BasinResult",
    "RowResult",
    "basin_map",
    "iter_rows",
    "iter_labels",
]


@dataclass(frozen=True)
class RowResult:
    row: int
    labels: np.ndarray   # int8, shape (width,)
    reasons: np.ndarray  # int8, shape (width,)
    steps: np.ndarray    # int32, shape (width,)


@dataclass
class BasinResult:
    """
    Per-pixel labels for one render.

    Arrays are indexed ``[row, col]``; ``labels`` holds PixelLabel values,
    ``reasons`` Termination values, ``steps`` the steps each trajectory ran.
    """
    labels: np.ndarray
    reasons: np.ndarray
    steps: np.ndarray
    attractors: AttractorSet
    sampler: PlaneSampler
    params: SimParams
    meta: dict[str, object] = field(default_factory=dict)

    @property
    def shape(self) -> tuple[int, int]:
        return self.labels.shape  # type: ignore[return-value]

    def label_at(self, col: int, row: int) -> PixelLabel:
        return PixelLabel(int(self.labels[row, col]))

    def counts(self) -> dict[PixelLabel, int]:
        values = np.bincount(self.labels.ravel().astype(np.int64), minlength=len(PixelLabel))
        return {label: int(values[int(label)]) for label in PixelLabel}


def emit_row(simulate_fn: Callable, classify_fn: Callable) -> Callable:
    """
    Generate a jittable kernel filling one pixel row.

    Signature:
        row_kernel(xs: float64[:], y: float64,
                   ax, ay, am: float64[:], cfg: float64[:],
                   labels_out: int8[:], reasons_out: int8[:], steps_out: int32[:]) -> None
    """
    def row_kernel(xs, y, ax, ay, am, cfg, labels_out, reasons_out, steps_out):
        far_sq = cfg[CFG_FAR_SQ]
        for i in range(xs.shape[0]):
            reason, fx, fy, n = simulate_fn(xs[i], y, ax, ay, am, cfg)
            labels_out[i] = classify_fn(reason, fx, fy, ax, ay, far_sq)
            reasons_out[i] = reason
            steps_out[i] = n

    return row_kernel


@lru_cache(maxsize=None)
def get_row_kernel(jit: bool) -> Callable:
    return jit_compile(
        emit_row(get_simulate_kernel(jit), get_classify_kernel(jit)),
        jit=jit,
        component="row",
    ).fn


def _resolve_backend(
    parallel_mode: Literal["auto", "threads", "process", "none"],
    max_workers: int | None,
    *,
    stacklevel: int = 3,
) -> str:
    if parallel_mode not in ("auto", "threads", "process", "none"):
        raise ValueError(f"Unknown parallel_mode {parallel_mode!r}")
    if max_workers is not None and max_workers <= 0:
        raise ValueError("max_workers must be positive")
    if parallel_mode == "process":
        warnings.warn(
            "parallel_mode='process' is not supported for basin maps; using threads.",
            RuntimeWarning,
            stacklevel=stacklevel,
        )
        parallel_mode = "threads"
    if parallel_mode == "none" or max_workers == 1:
        return "none"
    return "threads"


def _rows(
    attractors: AttractorSet,
    sampler: PlaneSampler,
    params: SimParams,
    jit: bool,
    backend: str,
    max_workers: int | None,
) -> Iterator[RowResult]:
    kernel = get_row_kernel(bool(jit))
    cfg = params.pack()
    xs = sampler.columns()
    ys = sampler.rows()
    ax, ay, am = attractors.xs, attractors.ys, attractors.masses
    width = int(sampler.width)

    def _run(row: int) -> RowResult:
        labels = np.empty((width,), dtype=np.int8)
        reasons = np.empty((width,), dtype=np.int8)
        steps = np.empty((width,), dtype=np.int32)
        kernel(xs, ys[row], ax, ay, am, cfg, labels, reasons, steps)
        return RowResult(row=row, labels=labels, reasons=reasons, steps=steps)

    if backend == "none":
        for row in range(int(sampler.height)):
            yield _run(row)
        return

    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        futures = [ex.submit(_run, row) for row in range(int(sampler.height))]
        for fut in as_completed(futures):
            yield fut.result()


def iter_rows(
    attractors: AttractorSet,
    sampler: PlaneSampler,
    *,
    params: SimParams | None = None,
    jit: bool = True,
    parallel_mode: Literal["auto", "threads", "process", "none"] = "auto",
    max_workers: int | None = None,
) -> Iterator[RowResult]:
    """
    Compute every row of the grid, yielding rows in completion order.

    Each row is an independent task; workers share only the read-only
    attractor arrays and the packed parameters. Arguments are validated
    on call, before the first row is requested.
    """
    backend = _resolve_backend(parallel_mode, max_workers)
    params = params if params is not None else SimParams()
    return _rows(attractors, sampler, params, jit, backend, max_workers)


def iter_labels(
    attractors: AttractorSet,
    sampler: PlaneSampler,
    **kwargs,
) -> Iterator[tuple[int, int, PixelLabel]]:
    """Stream ``(col, row, label)`` triples in completion order (see iter_rows)."""
    rows = iter_rows(attractors, sampler, **kwargs)
    return (
        (col, res.row, PixelLabel(int(res.labels[col])))
        for res in rows
        for col in range(res.labels.shape[0])
    )


def basin_map(
    attractors: AttractorSet,
    sampler: PlaneSampler | None = None,
    *,
    params: SimParams | None = None,
    jit: bool = True,
    parallel_mode: Literal["auto", "threads", "process", "none"] = "auto",
    max_workers: int | None = None,
    progress: bool = False,
) -> BasinResult:
    """
    Label every pixel of ``sampler``'s grid by the fate of its trajectory.

    Parameters
    ----------
    attractors : AttractorSet
        Built once by the caller and shared read-only by all rows.
    sampler : PlaneSampler | None
        Grid and zoom; defaults to the 1500x1500, zoom 1.5 reference grid.
    params : SimParams | None
        Integration and classification constants (reference values by default).
    jit : bool, default=True
        Compile the kernels with numba. ``False`` runs the same code in Python.
    parallel_mode : {"auto", "threads", "process", "none"}, default="auto"
        "auto" and "threads" fan rows out over a thread pool (compiled kernels
        release the GIL). "process" falls back to threads. "none" runs serially.
    max_workers : int | None
        Thread pool size; None uses the executor default.
    progress : bool, default=False
        Show a tqdm bar over completed rows.
    """
    params = params if params is not None else SimParams()
    sampler = sampler if sampler is not None else PlaneSampler()
    height, width = int(sampler.height), int(sampler.width)

    labels = np.empty((height, width), dtype=np.int8)
    reasons = np.empty((height, width), dtype=np.int8)
    steps = np.empty((height, width), dtype=np.int32)

    backend = _resolve_backend(parallel_mode, max_workers)

    t_start = time.perf_counter()
    rows = _rows(attractors, sampler, params, jit, backend, max_workers)
    with tqdm(total=height, desc="basin rows", unit="row", disable=not progress) as bar:
        for res in rows:
            labels[res.row] = res.labels
            reasons[res.row] = res.reasons
            steps[res.row] = res.steps
            bar.update(1)
    elapsed = time.perf_counter() - t_start

    return BasinResult(
        labels=labels,
        reasons=reasons,
        steps=steps,
        attractors=attractors,
        sampler=sampler,
        params=params,
        meta={
            "jit": bool(jit),
            "backend": backend,
            "max_workers": max_workers,
            "elapsed_s": elapsed,
        },
    )
