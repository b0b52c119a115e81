"""
API tests for discussions and threaded comments.
"""
import uuid

from studybuddy.models.discussion import Comment
from studybuddy.services.db import get_session


def new_discussion(client, title="How to approach the DSA assignment?"):
    r = client.post("/discussions", json={
        "title": title,
        "content": "Any tips on binary tree traversal?",
        "authorId": "rahul",
    })
    assert r.status_code == 201
    return r.json()


def comment(client, discussion_id, content, parent_id=None, author="priya"):
    body = {"content": content, "authorId": author}
    if parent_id:
        body["parentId"] = parent_id
    return client.post(f"/discussions/{discussion_id}/comments", json=body)


class TestDiscussions:
    def test_create_and_list_newest_first(self, client):
        first = new_discussion(client, "First")
        second = new_discussion(client, "Second")

        listed = client.get("/discussions").json()

        assert [d["id"] for d in listed] == [second["id"], first["id"]]
        assert listed[0]["replies"] == 0

    def test_reply_counts(self, client):
        d = new_discussion(client)
        root = comment(client, d["id"], "root").json()
        comment(client, d["id"], "reply", root["id"])

        listed = client.get("/discussions").json()

        assert listed[0]["replies"] == 2

    def test_unknown_discussion(self, client):
        assert client.get(f"/discussions/{uuid.uuid4()}").status_code == 404
        assert comment(client, uuid.uuid4(), "hello").status_code == 404

    def test_like(self, client):
        d = new_discussion(client)
        client.post(f"/discussions/{d['id']}/like")

        assert client.post(f"/discussions/{d['id']}/like").json()["likes"] == 2

    def test_limit(self, client):
        for title in ("one", "two", "three"):
            new_discussion(client, title)

        assert [d["title"] for d in client.get("/discussions", params={"limit": 2}).json()] == ["three", "two"]
        assert client.get("/discussions", params={"limit": -1}).status_code == 422

    def test_blank_title_rejected(self, client):
        r = client.post("/discussions", json={"title": "", "content": "x", "authorId": "a"})

        assert r.status_code == 422


class TestCommentTree:
    def test_nested_replies(self, client):
        d = new_discussion(client)
        a = comment(client, d["id"], "a").json()
        b = comment(client, d["id"], "b", a["id"]).json()
        c = comment(client, d["id"], "c", b["id"]).json()
        e = comment(client, d["id"], "e").json()
        f = comment(client, d["id"], "f", a["id"]).json()

        tree = client.get(f"/discussions/{d['id']}/comments").json()

        assert [n["id"] for n in tree] == [a["id"], e["id"]]
        assert [n["id"] for n in tree[0]["replies"]] == [b["id"], f["id"]]
        assert tree[0]["replies"][0]["replies"][0]["id"] == c["id"]
        assert tree[0]["replies"][0]["replies"][0]["replies"] == []
        assert tree[1]["replies"] == []

    def test_discussion_detail_embeds_tree(self, client):
        d = new_discussion(client)
        a = comment(client, d["id"], "a").json()
        comment(client, d["id"], "b", a["id"])

        detail = client.get(f"/discussions/{d['id']}").json()

        assert detail["replies"] == 2
        assert len(detail["comments"]) == 1
        assert detail["comments"][0]["replies"][0]["content"] == "b"

    def test_parent_from_other_discussion_rejected(self, client):
        d1 = new_discussion(client, "one")
        d2 = new_discussion(client, "two")
        foreign = comment(client, d1["id"], "elsewhere").json()

        r = comment(client, d2["id"], "reply", foreign["id"])

        assert r.status_code == 422
        assert client.get(f"/discussions/{d2['id']}/comments").json() == []

    def test_unknown_parent_rejected(self, client):
        d = new_discussion(client)

        assert comment(client, d["id"], "reply", str(uuid.uuid4())).status_code == 422

    def test_stored_orphan_renders_at_root(self, client):
        d = new_discussion(client)
        a = comment(client, d["id"], "a").json()
        with get_session() as s:
            s.add(Comment(
                discussion_id=uuid.UUID(d["id"]),
                parent_id=uuid.uuid4(),
                content="orphan",
                author_id="ghost",
            ))
            s.commit()

        tree = client.get(f"/discussions/{d['id']}/comments").json()

        assert [n["content"] for n in tree] == ["a", "orphan"]
        assert tree[0]["id"] == a["id"]
