"""
Threaded comment reconstruction.

Comments are stored flat: each row points at its parent comment, or at
nothing when it is a direct reply to the discussion. ``build_comment_tree``
turns all comments of one discussion into a forest of immutable nodes.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CommentNode:
    """A comment together with its (already built) replies."""
    id: Any
    parent_id: Optional[Any]
    content: str
    author_id: str
    created_at: Optional[datetime] = None
    replies: Tuple["CommentNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "parent_id": str(self.parent_id) if self.parent_id is not None else None,
            "content": self.content,
            "author_id": self.author_id,
            "created_at": self.created_at,
            "replies": [r.to_dict() for r in self.replies],
        }


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _node(record: Any, replies: Tuple[CommentNode, ...]) -> CommentNode:
    return CommentNode(
        id=_field(record, "id"),
        parent_id=_field(record, "parent_id"),
        content=_field(record, "content") or "",
        author_id=_field(record, "author_id") or "",
        created_at=_field(record, "created_at"),
        replies=replies,
    )


def build_comment_tree(comments: Iterable[Any]) -> List[CommentNode]:
    """
    Build the reply forest for one discussion.

    ``comments`` is any iterable of records exposing ``id``, ``parent_id``,
    ``content``, ``author_id`` and ``created_at`` (ORM rows, dicts, ...), in
    the order they were fetched (oldest first). The input is not modified.

    - A comment whose parent is in the input is nested under that parent.
    - A comment whose parent is missing is placed at root level.
    - Root order and each node's reply order follow the input order.
    - Corrupt parent chains (self-reference, cycles) are cut at the first
      member met in input order, which becomes a root, so every comment is
      returned exactly once.

    If an id occurs more than once, the first occurrence wins.
    """
    records: Dict[Any, Any] = {}
    position: Dict[Any, int] = {}
    for record in comments:
        cid = _field(record, "id")
        if cid in records:
            continue
        position[cid] = len(records)
        records[cid] = record

    children: Dict[Any, List[Any]] = {}
    root_ids: List[Any] = []
    for cid, record in records.items():
        pid = _field(record, "parent_id")
        if pid is not None and pid != cid and pid in records:
            children.setdefault(pid, []).append(cid)
        else:
            root_ids.append(cid)

    built: Dict[Any, CommentNode] = {}
    placed = set()

    def _place(top_id: Any) -> None:
        # pre-order walk, then build bottom-up so replies exist before parents
        order = []
        stack = [top_id]
        placed.add(top_id)
        while stack:
            nid = stack.pop()
            order.append(nid)
            for child in children.get(nid, ()):
                if child not in placed:
                    placed.add(child)
                    stack.append(child)
        for nid in reversed(order):
            # the only unbuilt child here is a cycle edge back to top_id
            replies = tuple(built[c] for c in children.get(nid, ()) if c in built)
            built[nid] = _node(records[nid], replies)

    forest_ids = []
    for rid in root_ids:
        _place(rid)
        forest_ids.append(rid)

    for cid in records:
        if cid not in placed:
            _place(cid)
            forest_ids.append(cid)

    forest_ids.sort(key=position.__getitem__)
    return [built[i] for i in forest_ids]


def iter_comment_tree(forest: Sequence[CommentNode]) -> Iterator[CommentNode]:
    """Depth-first, pre-order walk over every node of the forest."""
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.replies))


def count_comments(forest: Sequence[CommentNode]) -> int:
    return sum(1 for _ in iter_comment_tree(forest))
