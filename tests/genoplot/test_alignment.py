import pysam
import pytest

import genoplot.plot as Plot
from genoplot.alignment import READ_COLUMNS, AlignmentSource
from genoplot.errors import RangeQueryEmpty
from genoplot.util import CONFIG

READS = [
    # name, 0-based start, flag
    ("read1", 99, 16),
    ("read2", 109, 0),
    ("read3", 299, 0),
]


@pytest.fixture
def bam_path(tmp_path):
    path = str(tmp_path / "reads.bam")
    header = {"HD": {"VN": "1.0", "SO": "coordinate"}, "SQ": [{"SN": "chr1", "LN": 1000}]}
    with pysam.AlignmentFile(path, "wb", header=header) as out:
        for name, start, flag in READS:
            read = pysam.AlignedSegment(out.header)
            read.query_name = name
            read.query_sequence = "A" * 50
            read.flag = flag
            read.reference_id = 0
            read.reference_start = start
            read.mapping_quality = 60
            read.cigartuples = [(0, 50)]
            read.query_qualities = pysam.qualitystring_to_array("I" * 50)
            out.write(read)
    pysam.index(path)
    return path


@pytest.fixture
def reference_path(tmp_path):
    path = tmp_path / "ref.fa"
    sequence = "A" * 105 + "C" * 895
    lines = [sequence[i : i + 60] for i in range(0, len(sequence), 60)]
    path.write_text(">chr1\n" + "\n".join(lines) + "\n")
    pysam.faidx(str(path))
    return str(path)


def test_query_reads(bam_path):
    reads = AlignmentSource(bam_path).query("1:100-200")
    assert reads.columns == READ_COLUMNS
    assert reads.column("name").tolist() == ["read1", "read2"]
    assert reads.column("pos").tolist() == [100, 110]
    assert reads.column("end").tolist() == [149, 159]
    assert reads.column("strand").tolist() == ["-", "+"]
    assert reads.column("row").tolist() == [0, 1]


def test_empty_query_warns(bam_path):
    with pytest.warns(RangeQueryEmpty):
        reads = AlignmentSource(bam_path).query("chr1:500-600")
    assert len(reads) == 0
    assert reads.columns == READ_COLUMNS


def test_unknown_contig(bam_path):
    with pytest.raises(ValueError):
        AlignmentSource(bam_path).query("chr7:1-10")


def test_coverage(bam_path):
    coverage = AlignmentSource(bam_path).coverage("chr1:100-110")
    assert coverage.column("pos").tolist() == list(range(100, 111))
    assert coverage.column("depth").tolist() == [1] * 10 + [2]
    assert coverage.column("A").tolist() == coverage.column("depth").tolist()
    assert set(coverage.column("C")) == {0}


def test_mismatches(bam_path, reference_path):
    counts = AlignmentSource(bam_path, reference_path).mismatches("chr1:100-110")
    assert counts.column("ref").tolist() == ["A"] * 6 + ["C"] * 5
    assert counts.column("mismatch").tolist() == [0] * 6 + [1, 1, 1, 1, 2]


def test_mismatches_need_reference(bam_path, monkeypatch):
    monkeypatch.setitem(CONFIG, "reference_path", None)
    with pytest.raises(ValueError):
        AlignmentSource(bam_path).mismatches("chr1:100-110")


def test_path_from_config(bam_path, monkeypatch):
    monkeypatch.setitem(CONFIG, "alignment_path", None)
    with pytest.raises(ValueError):
        AlignmentSource()

    monkeypatch.setitem(CONFIG, "alignment_path", bam_path)
    assert AlignmentSource().path == bam_path


def test_autoplot_alignment_views(bam_path, reference_path):
    source = AlignmentSource(bam_path, reference_path)

    coverage = Plot.autoplot(Plot.AlignmentData(source, "chr1:90-160"))
    assert [l.geom.name for l in coverage.layers] == ["area"]
    assert coverage.labels.get("x") == "Position on chr1"

    pileup = Plot.autoplot(Plot.AlignmentData(source, "chr1:90-160", view="pileup"))
    assert [l.geom.name for l in pileup.layers] == ["segment"]
    assert pileup.scales["color"].options["domain"] == ["+", "-"]
    assert len(pileup.data) == 2

    mismatch = Plot.autoplot(Plot.AlignmentData(source, "chr1:100-110", view="mismatch"))
    assert [l.geom.name for l in mismatch.layers] == ["area", "segment"]
    _, segments = Plot.resolve_channels(mismatch)
    assert segments.data.column("pos").tolist() == [106, 107, 108, 109, 110]

    with pytest.raises(ValueError):
        Plot.autoplot(Plot.AlignmentData(source, "chr1:90-160", view="heatmap"))


def test_empty_region_still_plots(bam_path):
    source = AlignmentSource(bam_path)
    with pytest.warns(RangeQueryEmpty):
        p = Plot.autoplot(Plot.AlignmentData(source, "chr1:600-700", view="pileup"))
    assert len(p.data) == 0
    assert Plot.build(p).panels[0].layer_data[0] is p.data
