import pandas as pd
import pytest

from genoplot.dataset import Dataset, read_table, read_variants
from genoplot.errors import ColumnNotFound

ds = Dataset(
    {
        "Chr": ["1", "2", "1", "X"],
        "Start": [100, 50, 200, 10],
        "DP": [10, 20, 5, None],
        "Func": ["exonic", "intronic", "exonic", "intergenic"],
    }
)


def test_construction():
    assert ds.columns == ["Chr", "Start", "DP", "Func"]
    assert len(ds) == 4
    assert "DP" in ds
    assert "QUAL" not in ds

    from_records = Dataset([{"a": 1, "b": 2}, {"a": 3, "b": 4}])
    assert from_records.columns == ["a", "b"]
    assert len(Dataset(columns=["a", "b"])) == 0

    frame = pd.DataFrame({"a": [1]})
    wrapped = Dataset(frame)
    frame.loc[0, "a"] = 99
    assert wrapped.column("a").tolist() == [1]


def test_operations_return_new_datasets():
    filtered = ds.filter("DP > 6")
    assert len(filtered) == 2
    assert len(ds) == 4

    mutated = ds.mutate(End=lambda d: d["Start"] + 1)
    assert "End" in mutated
    assert "End" not in ds

    # the returned column is a copy
    column = ds.column("Start")
    column[0] = -1
    assert ds.column("Start")[0] == 100


def test_filter_forms():
    assert ds.filter("Func == 'exonic'").column("Start").tolist() == [100, 200]
    assert ds.filter(lambda d: d["Start"] < 100).column("Chr").tolist() == ["2", "X"]
    assert len(ds.filter([True, False, False, False])) == 1
    # missing values never match a mask
    assert ds.filter(lambda d: d["DP"] > 0).column("Chr").tolist() == ["1", "2", "1"]
    assert ds.isin("Func", {"exonic", "intergenic"}).column("Chr").tolist() == ["1", "1", "X"]


def test_missing_columns():
    with pytest.raises(ColumnNotFound) as e:
        ds.filter("QUAL > 30")
    assert e.value.column == "QUAL"
    with pytest.raises(ColumnNotFound):
        ds.filter(lambda d: d["QUAL"] > 30)
    with pytest.raises(ColumnNotFound):
        ds.select("Chr", "QUAL")
    with pytest.raises(ColumnNotFound):
        ds.column("QUAL")
    with pytest.raises(ColumnNotFound):
        ds.reorder("QUAL", [])
    with pytest.raises(KeyError):
        ds.isin("QUAL", [1])


def test_select_rename_drop_missing():
    assert ds.select("Func", "Chr").columns == ["Func", "Chr"]
    assert ds.rename(DP="depth").columns == ["Chr", "Start", "depth", "Func"]
    assert len(ds.drop_missing("DP")) == 3


def test_levels_and_reorder():
    assert ds.levels("Chr") == ["1", "2", "X"]
    assert ds.levels("Start") == [10, 50, 100, 200]

    reordered = ds.reorder("Func", ["intronic", "exonic"])
    assert reordered.levels("Func") == ["intronic", "exonic", "intergenic"]
    assert reordered.is_categorical("Func")
    # rows and their values are untouched
    assert reordered.column("Func").astype(str).tolist() == ds.column("Func").tolist()


def test_split_follows_levels():
    groups = ds.split("Chr")
    assert list(groups) == [("1",), ("2",), ("X",)]
    assert groups[("1",)].column("Start").tolist() == [100, 200]

    groups = ds.reorder("Chr", ["X", "2", "1"]).split(["Chr", "Func"])
    assert list(groups) == [("X", "intergenic"), ("2", "intronic"), ("1", "exonic")]


def test_split_missing_values_last():
    with_missing = Dataset({"g": ["b", None, "a"], "v": [1, 2, 3]})
    groups = with_missing.split("g")
    assert list(groups) == [("a",), ("b",), (None,)]


def test_records_and_extent():
    records = ds.records()
    assert records[3] == {"Chr": "X", "Start": 10, "DP": None, "Func": "intergenic"}
    assert ds.extent("Start") == (10.0, 200.0)
    assert ds.extent("DP", "Start") == (5.0, 200.0)


def test_read_variants_keeps_chromosomes_as_strings(tmp_path):
    path = tmp_path / "variants.csv"
    path.write_text("Chr,Start,End,DP\n1,100,100,10\n2,50,51,20\nX,10,10,3\n")
    variants = read_variants(str(path))
    assert variants.column("Chr").tolist() == ["1", "2", "X"]
    assert variants.column("DP").tolist() == [10, 20, 3]

    tsv = tmp_path / "variants.tsv"
    tsv.write_text("Chr\tStart\n1\t5\n")
    assert read_table(str(tsv)).columns == ["Chr", "Start"]
