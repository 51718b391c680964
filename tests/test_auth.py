from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from minigram.core.config import settings
from minigram.core.errors import Unauthenticated
from minigram.core.security import (
    ALGORITHM,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from minigram.users.models import User
from minigram.users.session import INVALID_SESSION, resolve_session
from tests.helpers import register


class TestSecurity:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert hashed.startswith("$argon2")
        assert verify_password("secret123", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_token_roundtrip_and_bad_sub(self):
        assert decode_access_token(create_access_token(42)) == 42
        bad = jwt.encode({"sub": "abc"}, settings.SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(JWTError):
            decode_access_token(bad)


class TestRegister:
    async def test_register_sets_cookie_and_hides_password(self, client, session):
        res = await client.post(
            "/api/auth/register",
            json={
                "username": "alice",
                "email": "Alice@Mail.com",
                "password": "secret123",
                "passwordConfirm": "secret123",
            },
        )
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["user"]["username"] == "alice"
        # email normalizado
        assert body["user"]["email"] == "alice@mail.com"
        assert "password" not in body["user"]
        assert "hashedPassword" not in body["user"]
        assert body["user"]["followers"] == []
        assert body["user"]["following"] == []

        set_cookie = res.headers["set-cookie"].lower()
        assert "token=" in set_cookie
        assert "httponly" in set_cookie
        assert "samesite=strict" in set_cookie

        stored = await session.get(User, body["user"]["id"])
        assert stored.hashed_password != "secret123"
        assert verify_password("secret123", stored.hashed_password)

    async def test_duplicate_email_rejected(self, client):
        await register(client, "alice")
        res = await client.post(
            "/api/auth/register",
            json={
                "username": "alice2",
                "email": "alice@mail.com",
                "password": "secret123",
                "passwordConfirm": "secret123",
            },
        )
        assert res.status_code == 400
        assert res.json() == {"success": False, "message": "Email already registered"}

    async def test_duplicate_username_rejected(self, client):
        await register(client, "alice")
        res = await client.post(
            "/api/auth/register",
            json={
                "username": "alice",
                "email": "other@mail.com",
                "password": "secret123",
                "passwordConfirm": "secret123",
            },
        )
        assert res.status_code == 400
        assert res.json()["message"] == "Username already taken"

    async def test_password_mismatch(self, client):
        res = await client.post(
            "/api/auth/register",
            json={
                "username": "bob",
                "email": "bob@mail.com",
                "password": "secret123",
                "passwordConfirm": "secret124",
            },
        )
        assert res.status_code == 400
        assert res.json()["message"] == "Passwords do not match"

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": "ab", "email": "ab@mail.com", "password": "secret123", "passwordConfirm": "secret123"},
            {"username": "bad name", "email": "x@mail.com", "password": "secret123", "passwordConfirm": "secret123"},
            {"username": "carol", "email": "not-an-email", "password": "secret123", "passwordConfirm": "secret123"},
            {"username": "carol", "email": "carol@mail.com", "password": "123", "passwordConfirm": "123"},
        ],
    )
    async def test_invalid_payload_is_400_envelope(self, client, payload):
        res = await client.post("/api/auth/register", json=payload)
        assert res.status_code == 400
        body = res.json()
        assert body["success"] is False
        assert body["message"]


class TestLogin:
    async def test_login_roundtrip(self, client, session):
        alice = await register(client, "alice")

        res = await client.post(
            "/api/auth/login",
            json={"email": "alice@mail.com", "password": "secret123"},
        )
        assert res.status_code == 200
        assert res.json()["message"] == "Logged in successfully"
        token = res.cookies["token"]

        user = await resolve_session(session, token)
        assert user.id == alice["id"]

        me = await client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["user"]["id"] == alice["id"]

    async def test_wrong_password_and_unknown_email_look_the_same(self, client):
        await register(client, "alice")

        wrong = await client.post(
            "/api/auth/login",
            json={"email": "alice@mail.com", "password": "nope-nope"},
        )
        unknown = await client.post(
            "/api/auth/login",
            json={"email": "ghost@mail.com", "password": "secret123"},
        )
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"success": False, "message": "Invalid credentials"}

    @pytest.mark.parametrize(
        "payload",
        [{}, {"email": "alice@mail.com"}, {"password": "secret123"}, {"email": "  ", "password": "secret123"}],
    )
    async def test_missing_credentials(self, client, payload):
        res = await client.post("/api/auth/login", json=payload)
        assert res.status_code == 400
        assert res.json() == {"success": False, "message": "Email and password are required"}

    async def test_logout_clears_session(self, client):
        await client.post(
            "/api/auth/register",
            json={
                "username": "alice",
                "email": "alice@mail.com",
                "password": "secret123",
                "passwordConfirm": "secret123",
            },
        )
        assert (await client.get("/api/auth/me")).status_code == 200

        res = await client.post("/api/auth/logout")
        assert res.status_code == 200
        assert res.json() == {"success": True, "message": "Logged out successfully"}

        me = await client.get("/api/auth/me")
        assert me.status_code == 401
        assert me.json()["message"] == "Unauthorized access, please login first"


class TestSession:
    async def test_missing_token(self, session):
        with pytest.raises(Unauthenticated) as exc:
            await resolve_session(session, None)
        assert exc.value.message == "Unauthorized access, please login first"

    async def test_garbage_and_expired_tokens_share_message(self, client):
        alice = await register(client, "alice")
        expired = jwt.encode(
            {"sub": str(alice["id"]), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            settings.SECRET_KEY,
            algorithm=ALGORITHM,
        )
        forged = jwt.encode({"sub": str(alice["id"])}, "other-secret", algorithm=ALGORITHM)

        for token in ("not-a-jwt", expired, forged):
            res = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
            assert res.status_code == 401
            assert res.json()["message"] == INVALID_SESSION

    async def test_token_for_deleted_user(self, client):
        token = create_access_token(9999)
        res = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401
        assert res.json()["message"] == INVALID_SESSION


class TestProfile:
    async def test_update_only_sent_fields(self, client):
        alice = await register(client, "alice")

        res = await client.put(
            "/api/auth/profile",
            json={"fullName": "Alice Liddell", "bio": "down the rabbit hole"},
            headers=alice["headers"],
        )
        assert res.status_code == 200
        user = res.json()["user"]
        assert user["fullName"] == "Alice Liddell"
        assert user["bio"] == "down the rabbit hole"

        res = await client.put(
            "/api/auth/profile",
            json={"profileImage": "https://img.mail.com/alice.png"},
            headers=alice["headers"],
        )
        user = res.json()["user"]
        assert user["profileImage"] == "https://img.mail.com/alice.png"
        assert user["fullName"] == "Alice Liddell"

    async def test_update_requires_auth(self, client):
        res = await client.put("/api/auth/profile", json={"bio": "x"})
        assert res.status_code == 401

    async def test_get_user_by_username(self, client):
        await register(client, "alice")
        res = await client.get("/api/auth/user/alice")
        assert res.status_code == 200
        assert res.json()["user"]["username"] == "alice"

        missing = await client.get("/api/auth/user/nobody")
        assert missing.status_code == 404
        assert missing.json() == {"success": False, "message": "User not found"}
