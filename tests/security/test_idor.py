"""
IDOR (Insecure Direct Object Reference) security tests.

These tests verify that callers cannot read, modify, publish or delete
prompts and files belonging to other callers by manipulating ids or paths.

OWASP Reference: A01:2021 - Broken Access Control
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.prompt import Prompt
from schemas.prompt import PromptCreate
from services.prompt_service import PromptService


@pytest.fixture
async def owner_private_prompt(
    db_session: AsyncSession, limits: Settings, owner_id: str,
) -> Prompt:
    """A private prompt owned by the owner caller."""
    return await PromptService().create(
        db_session,
        owner_id,
        PromptCreate(title="Secret", content="Confidential body", tags=["private"]),
        limits,
    )


@pytest.fixture
async def owner_public_prompt(
    db_session: AsyncSession, limits: Settings, owner_id: str,
) -> Prompt:
    """A public prompt owned by the owner caller."""
    return await PromptService().create(
        db_session,
        owner_id,
        PromptCreate(title="Shared", content="Public body", is_public=True),
        limits,
    )


class TestPromptIDOR:
    """Test IDOR protection for prompt resources."""

    async def test__get_prompt__returns_404_for_other_callers_private_prompt(
        self,
        other_client: AsyncClient,
        owner_private_prompt: Prompt,
    ) -> None:
        """Another caller cannot read a private prompt by id."""
        response = await other_client.get(f"/prompts/{owner_private_prompt.id}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Prompt not found"

    async def test__list_prompts__excludes_other_callers_private_prompt(
        self,
        other_client: AsyncClient,
        owner_private_prompt: Prompt,
    ) -> None:
        """Private prompts never leak through listings, filters included."""
        response = await other_client.get("/prompts", params={"tag": "private"})

        assert response.json() == []

    async def test__update_prompt__returns_404_for_other_callers_private_prompt(
        self,
        other_client: AsyncClient,
        owner_client: AsyncClient,
        owner_private_prompt: Prompt,
    ) -> None:
        """Another caller cannot modify a private prompt."""
        response = await other_client.put(
            f"/prompts/{owner_private_prompt.id}", json={"title": "Hacked"},
        )
        fetched = await owner_client.get(f"/prompts/{owner_private_prompt.id}")

        assert response.status_code == 404
        assert fetched.json()["title"] == "Secret"

    async def test__update_prompt__returns_403_for_other_callers_public_prompt(
        self,
        other_client: AsyncClient,
        owner_client: AsyncClient,
        owner_public_prompt: Prompt,
    ) -> None:
        """A visible prompt still cannot be modified by a non-owner."""
        response = await other_client.post(
            f"/prompts/{owner_public_prompt.id}", json={"is_public": False},
        )
        fetched = await owner_client.get(f"/prompts/{owner_public_prompt.id}")

        assert response.status_code == 403
        assert fetched.json()["is_public"] is True

    async def test__delete_prompt__returns_404_for_other_callers_prompt(
        self,
        other_client: AsyncClient,
        owner_client: AsyncClient,
        owner_public_prompt: Prompt,
    ) -> None:
        """Another caller cannot delete a prompt, even a visible one."""
        response = await other_client.delete(f"/prompts/{owner_public_prompt.id}")
        fetched = await owner_client.get(f"/prompts/{owner_public_prompt.id}")

        assert response.status_code == 404
        assert fetched.status_code == 200

    async def test__share_prompt__returns_404_for_other_callers_prompt(
        self,
        other_client: AsyncClient,
        client: AsyncClient,
        owner_private_prompt: Prompt,
    ) -> None:
        """Another caller cannot publish someone else's private prompt."""
        response = await other_client.post(f"/prompts/{owner_private_prompt.id}/share")
        public = await client.get(f"/share/{owner_private_prompt.id}")

        assert response.status_code == 404
        assert public.status_code == 404


class TestAssetIDOR:
    """Test path-scoped authorization for uploaded files."""

    async def test__delete_file__other_callers_path_is_403(
        self,
        owner_client: AsyncClient,
        other_client: AsyncClient,
    ) -> None:
        """Another caller cannot delete a file by guessing its path."""
        upload = await owner_client.post(
            "/upload", files={"file": ("a.png", b"png", "image/png")},
        )
        path = upload.json()["path"]

        response = await other_client.delete("/upload", params={"path": path})

        assert response.status_code == 403

    async def test__list_files__prefix_lookalike_folder_is_403(
        self,
        other_client: AsyncClient,
        other_id: str,
    ) -> None:
        """A folder that merely starts with the caller id is not the caller's folder."""
        response = await other_client.get("/upload", params={"folder": f"{other_id}x"})

        assert response.status_code == 403
