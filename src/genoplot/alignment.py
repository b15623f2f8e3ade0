import logging
import warnings
from typing import Any, Optional

import numpy as np
import pysam

from genoplot.dataset import Dataset
from genoplot.errors import RangeQueryEmpty
from genoplot.genome import GenomicRange, pack_rows, strip_chr
from genoplot.util import CONFIG

logger = logging.getLogger(__name__)

READ_COLUMNS = ["name", "chrom", "pos", "end", "cigar", "mapq", "seq", "flag", "strand", "row"]
COVERAGE_COLUMNS = ["chrom", "pos", "A", "C", "G", "T", "depth"]
BASES = ("A", "C", "G", "T")


def _contig(names, chrom: str) -> str:
    """Match 'chr1' against '1' (and vice versa) when the file uses the other style."""
    if chrom in names:
        return chrom
    for candidate in (strip_chr(chrom), f"chr{strip_chr(chrom)}"):
        if candidate in names:
            return candidate
    raise ValueError(f"Contig '{chrom}' is not in the file (has {list(names)[:5]}...)")


class AlignmentSource:
    """
    An indexed BAM/CRAM file (plus optional reference FASTA) queried by
    genomic range. Paths default to CONFIG["alignment_path"] and
    CONFIG["reference_path"].
    """

    def __init__(self, path: Optional[str] = None, reference: Optional[str] = None):
        path = path or CONFIG.get("alignment_path")
        if not path:
            raise ValueError(
                "No alignment file: pass a path, call configure(alignment_path=...) "
                "or set GENOPLOT_ALIGNMENT_PATH"
            )
        self.path = str(path)
        reference = reference or CONFIG.get("reference_path")
        self.reference = str(reference) if reference else None

    def __repr__(self):
        return f"<AlignmentSource {self.path}>"

    def _open(self) -> pysam.AlignmentFile:
        return pysam.AlignmentFile(self.path, reference_filename=self.reference)

    def query(self, which: Any, min_mapq: int = 0) -> Dataset:
        """Aligned reads overlapping `which`, one row per read, with a pileup row."""
        region = GenomicRange.coerce(which)
        with self._open() as bam:
            contig = _contig(bam.references, region.chrom)
            # pysam regions are 0-based, half-open
            records = [
                {
                    "name": read.query_name,
                    "chrom": read.reference_name,
                    "pos": read.reference_start + 1,
                    "end": read.reference_end,
                    "cigar": read.cigarstring,
                    "mapq": read.mapping_quality,
                    "seq": read.query_sequence,
                    "flag": read.flag,
                    "strand": "-" if read.is_reverse else "+",
                }
                for read in bam.fetch(contig, region.start - 1, region.end)
                if not read.is_unmapped and read.mapping_quality >= min_mapq
            ]
        logger.debug(f"{len(records)} reads in {region} from {self.path}")
        if not records:
            warnings.warn(RangeQueryEmpty(region), stacklevel=2)
            return Dataset(columns=READ_COLUMNS)
        rows = pack_rows([r["pos"] for r in records], [r["end"] for r in records], gap=1)
        for record, row in zip(records, rows):
            record["row"] = row
        return Dataset(records, columns=READ_COLUMNS)

    def coverage(self, which: Any, min_base_quality: int = 0) -> Dataset:
        """Per-position depth over `which`, with counts of each base."""
        region = GenomicRange.coerce(which)
        with self._open() as bam:
            contig = _contig(bam.references, region.chrom)
            if bam.count(contig, region.start - 1, region.end) == 0:
                warnings.warn(RangeQueryEmpty(region), stacklevel=2)
            counts = bam.count_coverage(
                contig, region.start - 1, region.end, quality_threshold=min_base_quality
            )
        counts = np.array([np.asarray(c) for c in counts], dtype=np.int64)
        columns = {
            "chrom": contig,
            "pos": np.arange(region.start, region.end + 1),
            **{base: counts[i] for i, base in enumerate(BASES)},
            "depth": counts.sum(axis=0),
        }
        return Dataset(columns, columns=COVERAGE_COLUMNS)

    def mismatches(self, which: Any, min_base_quality: int = 0) -> Dataset:
        """Coverage plus the reference base and the number of non-reference bases."""
        if self.reference is None:
            raise ValueError(
                "Mismatch counts need a reference FASTA: pass reference=... "
                "or set GENOPLOT_REFERENCE_PATH"
            )
        region = GenomicRange.coerce(which)
        coverage = self.coverage(region, min_base_quality)
        with pysam.FastaFile(self.reference) as fasta:
            contig = _contig(fasta.references, region.chrom)
            ref = fasta.fetch(contig, region.start - 1, region.end).upper()
        frame = coverage.to_pandas()
        ref_bases = list(ref.ljust(len(frame), "N"))
        matched = np.zeros(len(frame), dtype=np.int64)
        for base in BASES:
            is_base = np.array([b == base for b in ref_bases])
            matched = np.where(is_base, frame[base].to_numpy(), matched)
        known = np.array([b in BASES for b in ref_bases])
        return coverage.mutate(
            ref=ref_bases,
            mismatch=np.where(known, frame["depth"].to_numpy() - matched, 0),
        )
