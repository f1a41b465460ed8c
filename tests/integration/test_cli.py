"""
CLI command tests.

Parses real command lines and runs the handlers against the in-memory
blog service.
"""

from __future__ import annotations

from typing import Any

import pytest

from blogsync.app_shell.cli import HANDLERS, build_parser
from blogsync.app_shell.context import ClientContext
from blogsync.components.session import LoginInput

from tests.integration.conftest import FakeBlogService


@pytest.fixture
def seeded(service: FakeBlogService) -> dict[str, Any]:
    alice = service.add_user("alice", "a@x.com", "secret1", "author")
    tech = service.add_category("Tech")
    blog_id = service.add_blog("Existing", tech, alice)
    return {"alice": alice, "tech": tech, "blog_id": blog_id}


async def run_command(ctx: ClientContext, *argv: str) -> int:
    args = build_parser().parse_args(list(argv))
    return await HANDLERS[args.command](ctx, args)


# --- Parsing ---


class TestParser:
    def test_create_arguments(self) -> None:
        args = build_parser().parse_args(
            ["create", "Title", "Body", "--category", "c1", "--tags", "a, b", "--publish"]
        )

        assert (args.title, args.content, args.category) == ("Title", "Body", "c1")
        assert args.tags == "a, b"
        assert args.publish

    def test_update_status_is_restricted(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["update", "b1", "--status", "archived"])

    def test_every_command_has_a_handler(self) -> None:
        parser = build_parser()
        for command in HANDLERS:
            argv = [command]
            if command == "login":
                argv.append("a@x.com")
            elif command == "register":
                argv += ["alice", "a@x.com"]
            elif command in ("show", "like", "update", "delete"):
                argv.append("b1")
            elif command == "comment":
                argv += ["b1", "hello"]
            elif command == "create":
                argv += ["T", "C", "--category", "c1"]
            assert parser.parse_args(argv).command == command


# --- Authoring commands ---


class TestAuthoringCommands:
    @pytest.mark.asyncio
    async def test_create_update_delete(
        self,
        ctx: ClientContext,
        service: FakeBlogService,
        seeded: dict[str, Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        await ctx.session.login(LoginInput(email="a@x.com", password="secret1"))

        category = seeded["tech"]["_id"]
        code = await run_command(
            ctx, "create", "From the shell", "Body text", "--category", category, "--publish"
        )
        assert code == 0
        created = next(b for b in service.blogs if b["title"] == "From the shell")
        assert created["status"] == "published"
        assert f"Created {created['_id']}" in capsys.readouterr().out

        assert await run_command(ctx, "update", created["_id"], "--title", "Renamed") == 0
        assert created["title"] == "Renamed"

        assert await run_command(ctx, "delete", seeded["blog_id"]) == 0
        assert seeded["blog_id"] not in [b["_id"] for b in service.blogs]
        await ctx.aclose()

    @pytest.mark.asyncio
    async def test_update_without_changes_fails(
        self, ctx: ClientContext, service: FakeBlogService, seeded: dict[str, Any]
    ) -> None:
        await ctx.session.login(LoginInput(email="a@x.com", password="secret1"))
        sent = len(service.requests)

        code = await run_command(ctx, "update", seeded["blog_id"])

        assert code == 1
        # Only the session check reaches the service.
        assert service.requests[sent:] == ["GET /api/auth/me"]
        await ctx.aclose()

    @pytest.mark.asyncio
    async def test_create_requires_login(
        self, ctx: ClientContext, service: FakeBlogService, seeded: dict[str, Any]
    ) -> None:
        code = await run_command(ctx, "create", "T", "C", "--category", seeded["tech"]["_id"])

        assert code == 1
        assert service.requests == []
        await ctx.aclose()


# --- Profile ---


class TestProfileCommand:
    @pytest.mark.asyncio
    async def test_profile_update(
        self, ctx: ClientContext, service: FakeBlogService, seeded: dict[str, Any]
    ) -> None:
        await ctx.session.login(LoginInput(email="a@x.com", password="secret1"))

        code = await run_command(ctx, "profile", "--bio", "Writes from the terminal")

        assert code == 0
        assert service.users[seeded["alice"]["_id"]]["bio"] == "Writes from the terminal"
        assert ctx.session.user is not None
        assert ctx.session.user.bio == "Writes from the terminal"
        await ctx.aclose()

    @pytest.mark.asyncio
    async def test_profile_without_fields_fails(
        self, ctx: ClientContext, seeded: dict[str, Any]
    ) -> None:
        await ctx.session.login(LoginInput(email="a@x.com", password="secret1"))

        assert await run_command(ctx, "profile") == 1
        await ctx.aclose()
