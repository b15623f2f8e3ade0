import logging
import os
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from genoplot.errors import ColumnNotFound

logger = logging.getLogger(__name__)

CHROMOSOME_COLUMNS = ("Chr", "chr", "chrom", "CHROM", "seqnames", "chromosome")

Predicate = Union[str, Callable[[pd.DataFrame], Any], Sequence[bool], pd.Series]


class Dataset:
    """
    An immutable table of named, ordered columns.

    Every transformation (filter, mutate, select, reorder...) returns a new
    Dataset; the wrapped DataFrame is never modified in place.
    """

    def __init__(self, data: Any = None, columns: Optional[Sequence[str]] = None):
        if isinstance(data, Dataset):
            frame = data._frame.copy()
        elif isinstance(data, pd.DataFrame):
            frame = data.copy()
        elif data is None:
            frame = pd.DataFrame(columns=list(columns or []))
        else:
            frame = pd.DataFrame(data, columns=columns)
        self._frame = frame.reset_index(drop=True)

    @classmethod
    def _wrap(cls, frame: pd.DataFrame) -> "Dataset":
        ds = cls.__new__(cls)
        ds._frame = frame.reset_index(drop=True)
        return ds

    # Inspection

    @property
    def columns(self) -> List[str]:
        return [str(c) for c in self._frame.columns]

    def __len__(self) -> int:
        return len(self._frame)

    def __contains__(self, column: object) -> bool:
        return column in self._frame.columns

    def __getitem__(self, column: str) -> pd.Series:
        return self.column(column)

    def __repr__(self) -> str:
        return f"<Dataset rows={len(self)}, columns={self.columns}>"

    def require(self, *columns: str) -> None:
        for column in columns:
            if column not in self._frame.columns:
                raise ColumnNotFound(column, self.columns)

    def column(self, name: str) -> pd.Series:
        self.require(name)
        return self._frame[name].copy()

    def is_numeric(self, name: str) -> bool:
        self.require(name)
        return pd.api.types.is_numeric_dtype(self._frame[name])

    def is_categorical(self, name: str) -> bool:
        self.require(name)
        return isinstance(self._frame[name].dtype, pd.CategoricalDtype)

    def extent(self, *names: str) -> Optional[Tuple[float, float]]:
        """Min and max over the given numeric columns, ignoring missing values."""
        self.require(*names)
        if not names:
            return None
        values = pd.concat([self._frame[n] for n in names])
        values = pd.to_numeric(values, errors="coerce").dropna()
        if values.empty:
            return None
        return float(values.min()), float(values.max())

    def head(self, n: int = 5) -> "Dataset":
        return Dataset._wrap(self._frame.head(n))

    def to_pandas(self) -> pd.DataFrame:
        return self._frame.copy()

    def records(self) -> List[Dict[str, Any]]:
        frame = self._frame.astype(object)
        frame = frame.where(pd.notna(frame), None)
        return frame.to_dict("records")

    def for_json(self) -> List[Dict[str, Any]]:
        return self.records()

    # Transformations

    def filter(self, predicate: Predicate) -> "Dataset":
        """
        Keep rows matching `predicate`, which may be a pandas query string
        (eg. "DP > 10"), a callable returning a boolean mask for the frame,
        or a boolean mask.
        """
        frame = self._frame
        if isinstance(predicate, str):
            try:
                return Dataset._wrap(frame.query(predicate))
            except pd.errors.UndefinedVariableError as e:
                match = re.search(r"name '([^']+)' is not defined", str(e))
                raise ColumnNotFound(
                    match.group(1) if match else predicate, self.columns
                ) from e
        try:
            mask = predicate(frame) if callable(predicate) else predicate
        except KeyError as e:
            raise ColumnNotFound(str(e.args[0]), self.columns) from e
        mask = pd.Series(mask, index=frame.index).eq(True)
        return Dataset._wrap(frame[mask])

    def isin(self, column: str, values: Iterable[Any]) -> "Dataset":
        self.require(column)
        return Dataset._wrap(self._frame[self._frame[column].isin(list(values))])

    def drop_missing(self, *columns: str) -> "Dataset":
        self.require(*columns)
        return Dataset._wrap(self._frame.dropna(subset=list(columns) or None))

    def mutate(self, **columns: Any) -> "Dataset":
        """Add or replace columns. Values may be callables of the frame, scalars or sequences."""
        try:
            return Dataset._wrap(self._frame.assign(**columns))
        except KeyError as e:
            raise ColumnNotFound(str(e.args[0]), self.columns) from e

    def select(self, *columns: str) -> "Dataset":
        self.require(*columns)
        return Dataset._wrap(self._frame[list(columns)])

    def rename(self, **mapping: str) -> "Dataset":
        self.require(*mapping)
        return Dataset._wrap(self._frame.rename(columns=mapping))

    def reorder(self, column: str, levels: Sequence[Any]) -> "Dataset":
        """
        Fix the display order of `column`'s values. Values not listed in
        `levels` keep their rows and are ordered after the listed ones.
        """
        self.require(column)
        levels = list(dict.fromkeys(levels))
        extra = [v for v in _sorted_unique(self._frame[column]) if v not in levels]
        categorical = pd.Categorical(
            self._frame[column], categories=levels + extra, ordered=True
        )
        return Dataset._wrap(self._frame.assign(**{column: categorical}))

    # Grouping

    def levels(self, column: str) -> List[Any]:
        """Display order of a column's values: categorical order, else sorted."""
        self.require(column)
        series = self._frame[column]
        if isinstance(series.dtype, pd.CategoricalDtype):
            return list(series.cat.categories)
        return _sorted_unique(series)

    def split(self, columns: Union[str, Sequence[str]]) -> Dict[Tuple[Any, ...], "Dataset"]:
        """
        Partition rows by the values of `columns`, ordered by each column's
        levels. Missing values form their own group, placed last.
        """
        columns = [columns] if isinstance(columns, str) else list(columns)
        self.require(*columns)
        if not columns:
            return {(): self}
        positions = [
            {level: i for i, level in enumerate(self.levels(c))} for c in columns
        ]

        def sort_key(key):
            return tuple(
                len(pos) if _is_missing(k) else pos.get(k, len(pos))
                for k, pos in zip(key, positions)
            )

        grouped = self._frame.groupby(columns, observed=True, sort=False, dropna=False)
        groups = []
        for key, sub in grouped:
            key = key if isinstance(key, tuple) else (key,)
            key = tuple(None if _is_missing(k) else _plain(k) for k in key)
            groups.append((key, sub))
        groups.sort(key=lambda item: sort_key(item[0]))
        return {key: Dataset._wrap(sub) for key, sub in groups if len(sub)}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and np.isnan(value))


def _plain(value: Any) -> Any:
    return value.item() if isinstance(value, np.generic) else value


def _sorted_unique(series: pd.Series) -> List[Any]:
    values = [_plain(v) for v in series.dropna().unique()]
    try:
        return sorted(values)
    except TypeError:
        return sorted(values, key=str)


def _separator(path: str) -> str:
    _, ext = os.path.splitext(path.removesuffix(".gz"))
    return "\t" if ext in (".tsv", ".txt", ".tab") else ","


def read_table(path: str, sep: Optional[str] = None, **kwargs: Any) -> Dataset:
    """Load a delimited text file into a Dataset."""
    sep = sep or _separator(str(path))
    frame = pd.read_csv(path, sep=sep, **kwargs)
    logger.info(f"Loaded {len(frame)} rows x {len(frame.columns)} columns from {path}")
    return Dataset(frame)


def read_variants(path: str, sep: Optional[str] = None, **kwargs: Any) -> Dataset:
    """
    Load a variant annotation table (eg. ANNOVAR output). Chromosome columns
    are kept as strings so that '1' and 'X' sort and facet consistently.
    """
    sep = sep or _separator(str(path))
    header = pd.read_csv(path, sep=sep, nrows=0).columns
    dtype = {c: str for c in header if c in CHROMOSOME_COLUMNS}
    return read_table(path, sep=sep, dtype={**dtype, **kwargs.pop("dtype", {})}, **kwargs)
