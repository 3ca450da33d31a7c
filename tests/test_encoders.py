"""
Tests for report encodings.
"""
import io

from du_browser.core.encoders import to_flat_arrays, to_nested_tree, to_rows, write_text
from du_browser.core.scanner import DirectoryScanner


def test_rows(base_path):
    rows = to_rows(DirectoryScanner().walk(str(base_path)))

    assert [(r["name"], r["percentage"], r["size"], r["is_directory"]) for r in rows] == [
        ("c", "44.4%", "4 B", True),
        ("b", "33.3%", "3 B", False),
        ("a", "22.2%", "2 B", False),
        ("emptyDir", "0.0%", "0 B", True),
    ]


def test_nested_tree(base_path):
    tree = to_nested_tree(DirectoryScanner().walk(str(base_path)), "/")

    assert tree == {
        "name": "/",
        "children": [
            {"name": "c", "children": [{"name": "d", "value": 4}]},
            {"name": "b", "value": 3},
            {"name": "a", "value": 2},
            {"name": "emptyDir", "value": 0},
        ],
    }


def test_flat_arrays(base_path):
    flat = to_flat_arrays(DirectoryScanner().walk(str(base_path)))

    assert flat == {
        "ids": ["a", "b", "c", "c/d", "emptyDir"],
        "labels": ["a", "b", "c", "d", "emptyDir"],
        "parents": ["", "", "", "c", ""],
        "values": [2, 3, 0, 4, 0],
    }


def test_flat_arrays_invariants(base_path):
    (base_path / "c" / "e").mkdir()
    (base_path / "c" / "e" / "f").write_bytes(b"ffffff")
    (base_path / "Zed").write_bytes(b"Z")

    flat = to_flat_arrays(DirectoryScanner().walk(str(base_path)))

    lengths = {len(flat[key]) for key in ("ids", "labels", "parents", "values")}
    assert lengths == {len(flat["ids"])}
    assert flat["ids"] == sorted(flat["ids"])
    for parent in flat["parents"]:
        if parent:
            assert parent in flat["ids"]
    assert flat["parents"][flat["ids"].index("c/e/f")] == "c/e"
    assert sum(flat["values"]) == 2 + 3 + 4 + 6 + 1


def test_empty_report():
    assert to_rows([]) == []
    assert to_flat_arrays([]) == {"ids": [], "labels": [], "parents": [], "values": []}
    assert to_nested_tree([], "/x") == {"name": "/x", "children": []}


def test_write_text(base_path):
    out = io.StringIO()
    write_text(DirectoryScanner().walk(str(base_path)), out)

    assert out.getvalue().splitlines() == [
        "c 44.4% 4 B",
        "b 33.3% 3 B",
        "a 22.2% 2 B",
        "emptyDir 0.0% 0 B",
    ]


def test_encoders_handle_deep_trees(deep_path):
    root, depth = deep_path
    report = DirectoryScanner().walk(str(root))

    flat = to_flat_arrays(report)
    assert len(flat["ids"]) == depth + 1
    assert flat["ids"][-1] == "/".join(["d"] * depth + ["f"])
    assert flat["parents"][-1] == "/".join(["d"] * depth)
    assert sum(flat["values"]) == 2

    node = to_nested_tree(report, "/")
    levels = 0
    while "children" in node:
        assert len(node["children"]) == 1
        node = node["children"][0]
        levels += 1
    assert node == {"name": "f", "value": 2}
    assert levels == depth + 1
