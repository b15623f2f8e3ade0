import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from genoplot.dataset import Dataset

FACET_SCALES = ("fixed", "free", "free_x", "free_y")


@dataclass(frozen=True)
class Panel:
    """One small multiple: its grid position, grouping key and rows."""

    row: int
    col: int
    key: Tuple[Any, ...]
    label: str
    data: Optional[Dataset]


def _as_tuple(facets: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    if facets is None:
        return ()
    if isinstance(facets, str):
        return (facets,)
    return tuple(facets)


def _label(key: Tuple[Any, ...]) -> str:
    return ", ".join("NA" if k is None else str(k) for k in key)


@dataclass(frozen=True)
class FacetSpec:
    """
    Split a plot into small multiples by one or two sets of grouping columns.

    In "wrap" mode, panels for each combination of `cols` fill a grid row by
    row, `ncol` wide. In "grid" mode, `rows` and `cols` index the panel's
    row and column, and every combination gets a slot.
    """

    mode: str
    rows: Tuple[str, ...] = ()
    cols: Tuple[str, ...] = ()
    ncol: Optional[int] = None
    scales: str = "fixed"

    def __post_init__(self):
        if self.mode not in ("wrap", "grid"):
            raise ValueError(f"Unknown facet mode: '{self.mode}'")
        if self.scales not in FACET_SCALES:
            raise ValueError(
                f"facet scales must be one of {FACET_SCALES}, got '{self.scales}'"
            )
        if not self.rows and not self.cols:
            raise ValueError("A facet needs at least one grouping column")

    @property
    def variables(self) -> Tuple[str, ...]:
        return self.rows + self.cols

    def free(self, axis: str) -> bool:
        return self.scales == "free" or self.scales == f"free_{axis}"

    def shape(self, dataset: Dataset) -> Tuple[int, int]:
        panels = self.panels(dataset)
        if not panels:
            return (0, 0)
        return (max(p.row for p in panels) + 1, max(p.col for p in panels) + 1)

    def panels(self, dataset: Dataset) -> List[Panel]:
        dataset.require(*self.variables)
        if self.mode == "wrap":
            groups = dataset.split(list(self.variables))
            ncol = self.ncol or max(1, math.ceil(math.sqrt(len(groups))))
            return [
                Panel(i // ncol, i % ncol, key, _label(key), sub)
                for i, (key, sub) in enumerate(groups.items())
            ]

        row_keys = list(dataset.split(list(self.rows))) if self.rows else [()]
        col_keys = list(dataset.split(list(self.cols))) if self.cols else [()]
        groups = dataset.split(list(self.variables))
        panels = []
        for r, row_key in enumerate(row_keys):
            for c, col_key in enumerate(col_keys):
                key = row_key + col_key
                panels.append(Panel(r, c, key, _label(key), groups.get(key)))
        return panels


def facet_wrap(
    facets: Union[str, Sequence[str]], ncol: Optional[int] = None, scales: str = "fixed"
) -> FacetSpec:
    """Wrap a 1d sequence of panels (one per value of `facets`) into a grid."""
    return FacetSpec("wrap", cols=_as_tuple(facets), ncol=ncol, scales=scales)


def facet_grid(
    rows: Union[str, Sequence[str], None] = None,
    cols: Union[str, Sequence[str], None] = None,
    scales: str = "fixed",
) -> FacetSpec:
    """Lay out panels in a grid indexed by `rows` and `cols`."""
    return FacetSpec("grid", rows=_as_tuple(rows), cols=_as_tuple(cols), scales=scales)
