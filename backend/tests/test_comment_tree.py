"""
Unit tests for the threaded comment builder.
"""
import copy
from types import SimpleNamespace

from studybuddy.services.comment_tree import (
    build_comment_tree,
    count_comments,
    iter_comment_tree,
)


def c(cid, parent=None, content=""):
    return {"id": cid, "parent_id": parent, "content": content or f"comment {cid}", "author_id": "u1"}


def ids(nodes):
    return [n.id for n in nodes]


class TestTreeShape:
    """Parent/child placement."""

    def test_chain_nests_three_levels(self):
        forest = build_comment_tree([c("a"), c("b", "a"), c("c", "b")])

        assert ids(forest) == ["a"]
        a = forest[0]
        assert ids(a.replies) == ["b"]
        assert ids(a.replies[0].replies) == ["c"]
        assert a.replies[0].replies[0].replies == ()

    def test_orphan_becomes_root(self):
        forest = build_comment_tree([c("x", "missing")])

        assert ids(forest) == ["x"]
        assert forest[0].replies == ()

    def test_reply_is_never_at_root(self):
        forest = build_comment_tree([c("a"), c("b"), c("r1", "a"), c("r2", "b"), c("r3", "a")])

        assert ids(forest) == ["a", "b"]
        assert ids(forest[0].replies) == ["r1", "r3"]
        assert ids(forest[1].replies) == ["r2"]

    def test_reply_listed_before_its_parent_still_nests(self):
        forest = build_comment_tree([c("child", "p"), c("p")])

        assert ids(forest) == ["p"]
        assert ids(forest[0].replies) == ["child"]

    def test_empty_input(self):
        assert build_comment_tree([]) == []


class TestCompletenessAndOrder:
    """Every comment appears once; order follows the input."""

    def test_every_comment_exactly_once(self):
        records = [c("1"), c("2", "1"), c("3", "1"), c("4", "2"), c("5", "gone"),
                   c("6"), c("7", "6"), c("8", "7"), c("9", "4")]
        forest = build_comment_tree(records)

        seen = ids(iter_comment_tree(forest))
        assert sorted(seen) == sorted(r["id"] for r in records)
        assert len(seen) == len(set(seen))
        assert count_comments(forest) == len(records)

    def test_root_and_reply_order_preserved(self):
        records = [c("r1"), c("r2"), c("a", "r1"), c("r3"), c("b", "r1"), c("c", "r1")]
        forest = build_comment_tree(records)

        assert ids(forest) == ["r1", "r2", "r3"]
        assert ids(forest[0].replies) == ["a", "b", "c"]

    def test_orphan_keeps_its_input_position_among_roots(self):
        forest = build_comment_tree([c("a"), c("o", "nope"), c("b")])

        assert ids(forest) == ["a", "o", "b"]

    def test_preorder_walk(self):
        forest = build_comment_tree([c("a"), c("b", "a"), c("c", "b"), c("d", "a"), c("e")])

        assert ids(iter_comment_tree(forest)) == ["a", "b", "c", "d", "e"]


class TestPurity:
    """The builder neither mutates its input nor depends on previous calls."""

    def test_input_not_modified(self):
        records = [c("a"), c("b", "a")]
        snapshot = copy.deepcopy(records)

        build_comment_tree(records)

        assert records == snapshot

    def test_same_input_same_output(self):
        records = [c("a"), c("b", "a"), c("c", "missing")]

        assert build_comment_tree(records) == build_comment_tree(records)

    def test_accepts_objects_with_attributes(self):
        rows = [SimpleNamespace(id=1, parent_id=None, content="hi", author_id="u", created_at=None),
                SimpleNamespace(id=2, parent_id=1, content="yo", author_id="v", created_at=None)]

        forest = build_comment_tree(rows)

        assert forest[0].content == "hi"
        assert forest[0].replies[0].author_id == "v"


class TestCorruptData:
    """Broken parent chains still render every comment."""

    def test_self_parent_is_root(self):
        forest = build_comment_tree([c("a", "a")])

        assert ids(forest) == ["a"]

    def test_cycle_is_cut_at_first_member(self):
        forest = build_comment_tree([c("root"), c("x", "y"), c("y", "x"), c("z", "x")])

        assert ids(forest) == ["root", "x"]
        assert ids(forest[1].replies) == ["y", "z"]
        assert count_comments(forest) == 4

    def test_duplicate_ids_keep_first(self):
        forest = build_comment_tree([c("a", content="first"), c("a", content="second")])

        assert len(forest) == 1
        assert forest[0].content == "first"

    def test_very_deep_chain(self):
        records = [c("0")] + [c(str(i), str(i - 1)) for i in range(1, 5000)]

        forest = build_comment_tree(records)

        assert len(forest) == 1
        assert count_comments(forest) == 5000


def test_to_dict_stringifies_ids():
    forest = build_comment_tree([c(1), c(2, 1)])

    d = forest[0].to_dict()

    assert d["id"] == "1"
    assert d["parent_id"] is None
    assert d["replies"][0]["parent_id"] == "1"
    assert d["replies"][0]["replies"] == []
