"""Typed configuration and result containers for ORdensity core operations."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

import numpy as np
import pandas as pd


class DegenerateDataError(ValueError):
    """Raised when the data make a robust scale or index undefined."""


def _default_fold(n_replicates: int) -> int:
    return max(1, int(n_replicates) // 10)


@dataclass(frozen=True)
class ORDensityConfig:
    """Run parameters for one ORdensity computation.

    - `B`: number of permutation replicates of the pooled samples.
    - `fold`: number of partitions of the null exceedances; `None` means
      `floor(B / 10)` (at least one) and follows `B` through `with_overrides`.
      `n_folds` holds the resolved count.
    - `nprocs`: worker count when `parallel` is set; `0` or negative uses
      every available processor.
    - `numclustoseek`: largest cluster count tried by the reporting layer.
    """

    B: int = 100
    scale: bool = False
    alpha: float = 0.05
    fold: int | None = None
    probs: tuple[float, ...] = (0.25, 0.5, 0.75)
    weights: tuple[float, ...] = (0.25, 0.5, 0.25)
    numneighbours: int = 10
    numclustoseek: int = 10
    parallel: bool = False
    nprocs: int = 0
    replicable: bool = True
    seed: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "probs", tuple(float(p) for p in self.probs))
        object.__setattr__(self, "weights", tuple(float(w) for w in self.weights))
        self.validate()

    def validate(self) -> None:
        if len(self.probs) != len(self.weights):
            raise ValueError(
                f"probs and weights lengths do not match ({len(self.probs)} != {len(self.weights)})."
            )
        if len(self.probs) == 0:
            raise ValueError("probs must contain at least one quantile level.")
        probs = np.asarray(self.probs, dtype=float)
        if not np.all(np.isfinite(probs)) or np.any((probs < 0.0) | (probs > 1.0)):
            raise ValueError("probs must lie within [0, 1].")
        if np.any(np.diff(probs) < 0.0):
            raise ValueError("probs must be in ascending order.")
        if not np.all(np.isfinite(np.asarray(self.weights, dtype=float))):
            raise ValueError("weights must be finite.")
        if int(self.B) < 1:
            raise ValueError("B must be a positive number of replicates.")
        if self.fold is not None and int(self.fold) < 1:
            raise ValueError("fold must be positive.")
        if int(self.numneighbours) < 1:
            raise ValueError("numneighbours must be positive.")
        if int(self.numclustoseek) < 2:
            raise ValueError("numclustoseek must be at least 2.")
        if not 0.0 < float(self.alpha) < 1.0:
            raise ValueError("alpha must lie strictly between 0 and 1.")

    @property
    def n_folds(self) -> int:
        if self.fold is None:
            return _default_fold(self.B)
        return int(self.fold)

    def with_overrides(self, **overrides: Any) -> "ORDensityConfig":
        """Return a copy with selected fields replaced (`None` values are ignored)."""
        clean = {k: v for k, v in overrides.items() if v is not None}
        _check_known_keys(clean)
        return replace(self, **clean)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ORDensityConfig":
        data = dict(mapping)
        _check_known_keys(data)
        for key in ("probs", "weights"):
            if key in data:
                data[key] = tuple(data[key])
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Field values with `fold` resolved to the fold count actually used."""
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["fold"] = self.n_folds
        return out


def _check_known_keys(data: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(ORDensityConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown ORdensity config keys: {unknown}")


@dataclass(frozen=True)
class NullReplicate:
    """One permutation of the pooled samples."""

    index: int
    features: np.ndarray
    outlyingness: np.ndarray


@dataclass(frozen=True)
class ORDensityResult:
    """Output of `compute_ordensity`.

    - `summary`: one row per candidate gene, ordered by `DifExp` ascending
      and `OR` descending.
    - `OR`, `FP`, `dFP`: columns of `summary` as arrays, in the same order.
    - `p0`: expected share of null exceedances among the points of a fold.
    """

    summary: pd.DataFrame
    OR: np.ndarray
    FP: np.ndarray
    dFP: np.ndarray
    n_candidates: int
    p0: float
    p_candidates: float
    numneighbours: int
    cut_point: float
    n_exceedances: int
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def expected_false_positives(self) -> float:
        return float(self.p0 * self.numneighbours)

    def __len__(self) -> int:
        return int(self.n_candidates)
