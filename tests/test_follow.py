from sqlalchemy import select

from minigram.users.models import Follow
from tests.helpers import register


class TestFollow:
    async def test_follow_updates_both_sides(self, client):
        alice = await register(client, "alice")
        bob = await register(client, "bob")

        res = await client.post(f"/api/auth/follow/{bob['id']}", headers=alice["headers"])
        assert res.status_code == 200
        body = res.json()
        assert body["message"] == "User followed successfully"
        assert [u["id"] for u in body["user"]["following"]] == [bob["id"]]
        assert body["user"]["followingCount"] == 1

        bob_view = (await client.get("/api/auth/user/bob")).json()["user"]
        assert [u["id"] for u in bob_view["followers"]] == [alice["id"]]
        assert bob_view["followerCount"] == 1
        assert bob_view["following"] == []

    async def test_cannot_follow_self(self, client, session):
        alice = await register(client, "alice")
        res = await client.post(f"/api/auth/follow/{alice['id']}", headers=alice["headers"])
        assert res.status_code == 400
        assert res.json()["message"] == "You cannot follow yourself"

        rows = (await session.execute(select(Follow))).scalars().all()
        assert rows == []

    async def test_follow_twice_is_rejected(self, client):
        alice = await register(client, "alice")
        bob = await register(client, "bob")

        await client.post(f"/api/auth/follow/{bob['id']}", headers=alice["headers"])
        again = await client.post(f"/api/auth/follow/{bob['id']}", headers=alice["headers"])
        assert again.status_code == 400
        assert again.json()["message"] == "You are already following this user"

        bob_view = (await client.get("/api/auth/user/bob")).json()["user"]
        assert bob_view["followerCount"] == 1

    async def test_follow_unknown_user(self, client):
        alice = await register(client, "alice")
        res = await client.post("/api/auth/follow/4242", headers=alice["headers"])
        assert res.status_code == 404
        assert res.json()["message"] == "User not found"

    async def test_follow_requires_auth(self, client):
        bob = await register(client, "bob")
        res = await client.post(f"/api/auth/follow/{bob['id']}")
        assert res.status_code == 401


class TestUnfollow:
    async def test_unfollow_removes_both_sides(self, client):
        alice = await register(client, "alice")
        bob = await register(client, "bob")
        await client.post(f"/api/auth/follow/{bob['id']}", headers=alice["headers"])

        res = await client.delete(f"/api/auth/unfollow/{bob['id']}", headers=alice["headers"])
        assert res.status_code == 200
        assert res.json()["message"] == "User unfollowed successfully"
        assert res.json()["user"]["following"] == []

        bob_view = (await client.get("/api/auth/user/bob")).json()["user"]
        assert bob_view["followers"] == []

    async def test_unfollow_when_not_following(self, client):
        alice = await register(client, "alice")
        bob = await register(client, "bob")
        res = await client.delete(f"/api/auth/unfollow/{bob['id']}", headers=alice["headers"])
        assert res.status_code == 400
        assert res.json()["message"] == "You are not following this user"

    async def test_cannot_unfollow_self(self, client):
        alice = await register(client, "alice")
        res = await client.delete(f"/api/auth/unfollow/{alice['id']}", headers=alice["headers"])
        assert res.status_code == 400
        assert res.json()["message"] == "You cannot unfollow yourself"
