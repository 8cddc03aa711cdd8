"""Normally distributed return draws via the Box–Muller transform.

Uniform variates come from a :class:`numpy.random.Generator`.  Passing a
``seed`` makes a run reproducible; the default (``None``) draws fresh OS
entropy on every call, so results differ run to run.
"""

from __future__ import annotations

import math
from typing import Optional, Protocol, Tuple

import numpy as np

_BLOCK_SIZE = 4096


class Sampler(Protocol):
    def sample(self, mean: float, stddev: float) -> float: ...


def box_muller(u1: np.ndarray, u2: np.ndarray) -> np.ndarray:
    """Standard normal variates from two uniform arrays.

    ``u1`` must lie in ``(0, 1]``; ``log(0)`` is undefined.
    """
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * math.pi * u2)


def standard_normals(rng: np.random.Generator, size) -> np.ndarray:
    # rng.random() is on [0, 1); flipping it keeps u1 away from zero
    u1 = 1.0 - rng.random(size)
    u2 = rng.random(size)
    return box_muller(u1, u2)


class NormalSampler:
    """Draws ``Normal(mean, stddev)`` values one at a time.

    Standard normals are generated in blocks and handed out sequentially,
    which keeps per-draw overhead low inside the month-by-month trial loops.
    Not thread-safe: give each worker its own sampler.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._buffer = np.empty(0)
        self._pos = 0

    def _next_standard(self) -> float:
        if self._pos >= len(self._buffer):
            self._buffer = standard_normals(self.rng, _BLOCK_SIZE)
            self._pos = 0
        z = self._buffer[self._pos]
        self._pos += 1
        return float(z)

    def sample(self, mean: float, stddev: float) -> float:
        return mean + self._next_standard() * stddev


def sample_normal(mean: float, stddev: float, rng: Optional[np.random.Generator] = None) -> float:
    """Single Box–Muller draw; convenient outside of the simulators."""
    rng = rng if rng is not None else np.random.default_rng()
    return mean + float(standard_normals(rng, 1)[0]) * stddev


def resolve_sampler(sampler: Optional[Sampler], seed: Optional[int]) -> Sampler:
    return sampler if sampler is not None else NormalSampler(seed=seed)


def monthly_log_params(mean_return_pct: float, volatility_pct: float) -> Tuple[float, float]:
    """Monthly log-return mean and volatility for annual percentage inputs.

    A mean of -100% or below has no logarithm; it maps to ``-inf`` so every
    draw wipes out the balance.
    """
    growth = 1 + mean_return_pct / 100
    monthly_mean = math.log(growth) / 12.0 if growth > 0 else -math.inf
    monthly_vol = (volatility_pct / 100) / math.sqrt(12.0)
    return monthly_mean, monthly_vol
