import pytest

import genoplot.plot as Plot
from genoplot.genome import GenomicRange, chromosome_levels, pack_rows


def test_parse_range():
    r = GenomicRange.parse("chr17:41,196,312-41,277,500")
    assert r == GenomicRange("chr17", 41196312, 41277500)
    assert r.width == 41277500 - 41196312 + 1
    assert str(r) == "chr17:41196312-41277500"

    assert GenomicRange.coerce(("1", 10, 20)) == GenomicRange("1", 10, 20)
    assert GenomicRange.coerce(r) is r

    with pytest.raises(ValueError):
        GenomicRange.parse("chr1:100")
    with pytest.raises(ValueError):
        GenomicRange("1", 200, 100)
    with pytest.raises(TypeError):
        GenomicRange.coerce(42)


def test_overlaps_ignores_chr_prefix():
    assert GenomicRange("chr1", 100, 200).overlaps(GenomicRange("1", 200, 300))
    assert not GenomicRange("chr1", 100, 200).overlaps(GenomicRange("1", 201, 300))
    assert not GenomicRange("1", 100, 200).overlaps(GenomicRange("2", 100, 200))


def test_chromosome_levels():
    names = ["10", "X", "2", "1", "Y", "MT", "22", "GL000220.1", "2"]
    assert chromosome_levels(names) == ["1", "2", "10", "22", "X", "Y", "MT", "GL000220.1"]
    assert chromosome_levels(["chrX", "chr2", "chr11"]) == ["chr2", "chr11", "chrX"]
    # missing chromosomes are not levels
    assert chromosome_levels(["2", None, float("nan"), "1"]) == ["1", "2"]


def test_order_chromosomes_keeps_rows_with_missing_chromosome():
    variants = Plot.Dataset({"Chr": ["2", None, "1"], "DP": [1, 2, 3]})
    ordered = Plot.order_chromosomes(variants)
    assert ordered.levels("Chr") == ["1", "2"]
    assert len(ordered) == 3
    assert list(ordered.split("Chr")) == [("1",), ("2",), (None,)]


def test_pack_rows():
    # two overlapping reads stack; the third fits back on the first row
    assert pack_rows([100, 110, 300], [149, 159, 349]) == [0, 1, 0]
    # input order is preserved in the result
    assert pack_rows([300, 100, 110], [349, 149, 159]) == [0, 0, 1]
    # intervals touching within the gap do not share a row
    assert pack_rows([1, 11], [10, 20], gap=1) == [0, 1]
    assert pack_rows([], []) == []
