import httpx


class FakeAIClient:
    """Devuelve siempre el mismo texto y guarda los prompts recibidos."""

    def __init__(self, reply: str = "Sunset vibes #sunset #beach"):
        self.reply = reply
        self.calls: list[tuple[str, str | None]] = []

    async def generate(self, prompt: str, base64_image: str | None = None) -> str:
        self.calls.append((prompt, base64_image))
        return self.reply


async def register(client: httpx.AsyncClient, username: str, password: str = "secret123") -> dict:
    """
    Registra un usuario y devuelve {"id", "token", "headers"}.
    Limpia la cookie del cliente para que cada test elija con qué
    usuario habla (vía Authorization: Bearer).
    """
    res = await client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": f"{username}@mail.com",
            "password": password,
            "passwordConfirm": password,
        },
    )
    assert res.status_code == 201, res.text
    token = res.cookies["token"]
    client.cookies.clear()
    return {
        "id": res.json()["user"]["id"],
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


async def create_post(client: httpx.AsyncClient, user: dict, caption: str = "hello", tags=None) -> dict:
    res = await client.post(
        "/api/posts",
        json={"caption": caption, "imageUrl": "https://img.mail.com/a.jpg", "tags": tags or []},
        headers=user["headers"],
    )
    assert res.status_code == 201, res.text
    return res.json()["post"]
