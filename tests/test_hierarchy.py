import pytest

from services.hierarchy import (
    HierarchyError,
    build_hierarchy,
    default_hierarchy,
    hierarchy_to_text,
    load_hierarchy_csv,
    parse_hierarchy,
)
from services.models import ClassificationNode

SAMPLE = """
# comment lines are ignored
01 PRODUITS FRAIS
  0101 FRUITS ET LEGUMES
    010101 FRUITS
      01010101 POMMES ET POIRES
      01010102 AGRUMES
02 EPICERIE
  0201 EPICERIE SALEE
    020101 PATES RIZ
      02010101 PATES
"""


def test_parse_hierarchy_keeps_order_and_parents():
    nodes = parse_hierarchy(SAMPLE)

    assert [n.code for n in nodes] == [
        "01",
        "0101",
        "010101",
        "01010101",
        "01010102",
        "02",
        "0201",
        "020101",
        "02010101",
    ]
    assert nodes[0] == ClassificationNode(level=1, code="01", name="PRODUITS FRAIS", parent_code=None)
    assert nodes[4] == ClassificationNode(
        level=4, code="01010102", name="AGRUMES", parent_code="010101"
    )
    assert nodes[6].parent_code == "02"


def test_every_non_root_node_references_parent_one_level_up():
    nodes = default_hierarchy()
    by_code = {n.code: n for n in nodes}

    assert {n.level for n in nodes} == {1, 2, 3, 4}
    for node in nodes:
        if node.level == 1:
            assert node.parent_code is None
        else:
            assert by_code[node.parent_code].level == node.level - 1


def test_hierarchy_to_text_renders_breadcrumbs():
    text = hierarchy_to_text(parse_hierarchy(SAMPLE))
    lines = text.split("\n")

    assert lines[0] == "- 01 PRODUITS FRAIS"
    assert lines[1] == "  - 01 PRODUITS FRAIS > 0101 FRUITS ET LEGUMES"
    assert lines[4] == (
        "      - 01 PRODUITS FRAIS > 0101 FRUITS ET LEGUMES > 010101 FRUITS > 01010102 AGRUMES"
    )
    assert lines[5] == "- 02 EPICERIE"


def test_breadcrumb_segment_count_matches_level():
    nodes = default_hierarchy()
    lines = hierarchy_to_text(nodes).split("\n")

    assert len(lines) == len(nodes)
    for node, line in zip(nodes, lines):
        assert line.startswith("  " * (node.level - 1) + "- ")
        assert len(line.strip()[2:].split(" > ")) == node.level


def test_hierarchy_to_text_is_idempotent():
    nodes = default_hierarchy()
    assert hierarchy_to_text(nodes) == hierarchy_to_text(nodes)
    assert hierarchy_to_text(nodes) == hierarchy_to_text(_rebuild(nodes))


def _rebuild(nodes):
    return build_hierarchy(
        {"level": n.level, "code": n.code, "name": n.name, "parent_code": n.parent_code}
        for n in nodes
    )


@pytest.mark.parametrize(
    "text",
    [
        "01 A\n    010101 SKIPPED RAYON",
        "  0101 NO SECTEUR",
        "01 A\n   0101 ODD INDENT",
        "01 A\n  0101",
        "01 A\n  0101 B\n    010101 C\n      01010101 D\n        0101010101 E",
        "01 A\n01 DUPLICATE",
    ],
)
def test_parse_hierarchy_rejects_malformed_outline(text):
    with pytest.raises(HierarchyError):
        parse_hierarchy(text)


@pytest.mark.parametrize(
    "records",
    [
        [{"level": 2, "code": "0101", "name": "ORPHAN", "parent_code": "01"}],
        [
            {"level": 1, "code": "01", "name": "A", "parent_code": None},
            {"level": 3, "code": "010101", "name": "WRONG LEVEL", "parent_code": "01"},
        ],
        [{"level": 1, "code": "01", "name": "A", "parent_code": "00"}],
        [{"level": "x", "code": "01", "name": "A", "parent_code": None}],
        [{"level": 1, "code": "", "name": "A", "parent_code": None}],
    ],
)
def test_build_hierarchy_rejects_broken_records(records):
    with pytest.raises(HierarchyError):
        build_hierarchy(records)


def test_load_hierarchy_csv(tmp_path):
    path = tmp_path / "hierarchy.csv"
    path.write_text(
        "level,code,name,parent_code\n"
        "1,10,ALIMENTAIRE,\n"
        "2,1010,FRAIS,10\n"
        "3,101010,LAITIERS,1010\n"
        "4,10101010,YAOURTS,101010\n",
        encoding="utf-8",
    )

    nodes = load_hierarchy_csv(path)

    assert [n.level for n in nodes] == [1, 2, 3, 4]
    assert nodes[0].parent_code is None
    assert nodes[3].parent_code == "101010"


def test_load_hierarchy_csv_requires_columns(tmp_path):
    path = tmp_path / "hierarchy.csv"
    path.write_text("code,name\n10,ALIMENTAIRE\n", encoding="utf-8")

    with pytest.raises(HierarchyError):
        load_hierarchy_csv(path)
