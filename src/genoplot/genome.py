import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence, Tuple

import pandas as pd

_RANGE_RE = re.compile(r"^\s*([^:\s]+)\s*:\s*([\d,]+)\s*-\s*([\d,]+)\s*$")
_SEX_AND_MITO = {"X": 23, "Y": 24, "M": 25, "MT": 25}


@dataclass(frozen=True)
class GenomicRange:
    """A 1-based, inclusive (chromosome, start, end) interval."""

    chrom: str
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(
                f"Range start ({self.start}) is after its end ({self.end})"
            )

    @classmethod
    def parse(cls, text: str) -> "GenomicRange":
        """Parse a region string such as 'chr1:10,000-20,000'."""
        match = _RANGE_RE.match(text)
        if match is None:
            raise ValueError(f"Cannot parse genomic range: {text!r}")
        chrom, start, end = match.groups()
        return cls(chrom, int(start.replace(",", "")), int(end.replace(",", "")))

    @classmethod
    def coerce(cls, value: Any) -> "GenomicRange":
        if isinstance(value, GenomicRange):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, (list, tuple)) and len(value) == 3:
            chrom, start, end = value
            return cls(str(chrom), int(start), int(end))
        raise TypeError(f"Cannot interpret {value!r} as a genomic range")

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    def overlaps(self, other: "GenomicRange") -> bool:
        return (
            strip_chr(self.chrom) == strip_chr(other.chrom)
            and self.start <= other.end
            and other.start <= self.end
        )

    def __str__(self) -> str:
        return f"{self.chrom}:{self.start}-{self.end}"


def strip_chr(name: Any) -> str:
    name = str(name)
    return name[3:] if name.lower().startswith("chr") else name


def chromosome_key(name: Any) -> Tuple[int, int, str]:
    """
    Sort key placing autosomes numerically, then X, Y and mitochondria,
    then anything else (unplaced contigs etc.) lexicographically.
    """
    bare = strip_chr(name)
    if bare.isdigit():
        return (0, int(bare), "")
    if bare.upper() in _SEX_AND_MITO:
        return (1, _SEX_AND_MITO[bare.upper()], "")
    return (2, 0, bare)


def chromosome_levels(values: Iterable[Any]) -> List[Any]:
    """Unique chromosome names in genome order: 1..22, X, Y, MT, others."""
    return sorted(set(v for v in values if pd.notna(v)), key=chromosome_key)


def pack_rows(starts: Sequence[int], ends: Sequence[int], gap: int = 0) -> List[int]:
    """
    Greedily assign each interval to the lowest row whose last interval ends
    before it starts. Returns one row index per interval, in input order.
    """
    order = sorted(range(len(starts)), key=lambda i: (starts[i], ends[i]))
    row_ends: List[int] = []
    rows = [0] * len(starts)
    for i in order:
        for row, last_end in enumerate(row_ends):
            if starts[i] > last_end + gap:
                row_ends[row] = ends[i]
                rows[i] = row
                break
        else:
            row_ends.append(ends[i])
            rows[i] = len(row_ends) - 1
    return rows
