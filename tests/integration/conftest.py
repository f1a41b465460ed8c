"""
In-memory blog service for end-to-end client tests.

A small FastAPI app answering the endpoints the client uses, with the same
`{success, data, message}` envelope and status codes as the real service.
The client reaches it through httpx.ASGITransport, so no socket is opened.
"""

from __future__ import annotations

import itertools
import math
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from blogsync.adapters.credential_store import InMemoryCredentialStore
from blogsync.adapters.navigation import InMemoryNavigator
from blogsync.app_shell.context import ClientContext
from blogsync.rules.models import ApiRules, ClientRules


def ok(data: dict[str, Any], status: int = 200) -> JSONResponse:
    return JSONResponse({"success": True, "data": data}, status_code=status)


def fail(status: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status)


def now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeBlogService:
    """State behind the fake API; tests seed and inspect it directly."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.users: dict[str, dict[str, Any]] = {}
        self.passwords: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.categories: list[dict[str, Any]] = []
        self.blogs: list[dict[str, Any]] = []
        self.comments: list[dict[str, Any]] = []
        self.likes: dict[tuple[str, str], str] = {}
        self.requests: list[str] = []

    def new_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def add_user(self, username: str, email: str, password: str, role: str) -> dict[str, Any]:
        user = {
            "_id": self.new_id("u"),
            "username": username,
            "email": email,
            "role": role,
            "bio": "",
            "avatar": "",
            "isActive": True,
            "createdAt": now(),
        }
        self.users[user["_id"]] = user
        self.passwords[email] = password
        return user

    def add_category(self, name: str) -> dict[str, Any]:
        category = {"_id": self.new_id("c"), "name": name, "color": "#333", "blogCount": 0}
        self.categories.append(category)
        return category

    def add_blog(self, title: str, category: dict[str, Any], author: dict[str, Any]) -> str:
        blog = {
            "_id": self.new_id("b"),
            "title": title,
            "content": f"Content of {title}",
            "excerpt": "",
            "category": category["_id"],
            "author": author["_id"],
            "tags": [],
            "status": "published",
            "views": 0,
            "likes": [],
            "readTime": 1,
            "createdAt": now(),
        }
        self.blogs.append(blog)
        return blog["_id"]

    def issue_token(self, user: dict[str, Any]) -> str:
        token = f"token-{user['_id']}-{len(self.tokens)}"
        self.tokens[token] = user["_id"]
        return token

    def user_for(self, request: Request) -> dict[str, Any] | None:
        header = request.headers.get("authorization", "")
        if not header.startswith("Bearer "):
            return None
        user_id = self.tokens.get(header.removeprefix("Bearer "))
        return self.users.get(user_id) if user_id else None

    def populated(self, blog: dict[str, Any]) -> dict[str, Any]:
        category = next((c for c in self.categories if c["_id"] == blog["category"]), None)
        author = self.users.get(blog["author"])
        likes = [u for (b, u), kind in self.likes.items() if b == blog["_id"] and kind == "like"]
        return {
            **blog,
            "category": category,
            "author": {"_id": author["_id"], "username": author["username"]} if author else None,
            "likes": likes,
        }

    def like_status(self, blog_id: str, user_id: str) -> dict[str, Any]:
        kind = self.likes.get((blog_id, user_id))
        count = sum(1 for (b, _), k in self.likes.items() if b == blog_id and k == "like")
        return {"isLiked": kind is not None, "likeType": kind, "likeCount": count}


def page_of(items: list[dict[str, Any]], page: int, limit: int) -> dict[str, Any]:
    start = (page - 1) * limit
    return {
        "blogs": items[start : start + limit],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": len(items),
            "pages": math.ceil(len(items) / limit),
        },
    }


def create_app(service: FakeBlogService) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def record(request: Request, call_next: Any) -> Any:
        service.requests.append(f"{request.method} {request.url.path}")
        return await call_next(request)

    # --- Auth ---

    @app.post("/api/auth/login")
    async def login(request: Request) -> JSONResponse:
        body = await request.json()
        email = body.get("email")
        if service.passwords.get(email) != body.get("password"):
            return fail(400, "Invalid credentials")
        user = next(u for u in service.users.values() if u["email"] == email)
        return ok({"token": service.issue_token(user), "user": user})

    @app.post("/api/auth/register")
    async def register(request: Request) -> JSONResponse:
        body = await request.json()
        if body["email"] in service.passwords:
            return fail(400, "User already exists")
        user = service.add_user(body["username"], body["email"], body["password"], body["role"])
        return ok({"token": service.issue_token(user), "user": user}, 201)

    @app.get("/api/auth/me")
    async def me(request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        return ok({"user": user})

    @app.put("/api/auth/update")
    async def update_profile(request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        body = await request.json()
        user.update({k: v for k, v in body.items() if k in ("username", "email", "bio", "avatar")})
        return ok({"user": user})

    # --- Blogs ---

    @app.get("/api/blogs")
    async def list_blogs(
        search: str | None = None, category: str | None = None, page: int = 1, limit: int = 10
    ) -> JSONResponse:
        items = [b for b in service.blogs if b["status"] == "published"]
        if category:
            items = [b for b in items if b["category"] == category]
        if search:
            items = [b for b in items if search.lower() in b["title"].lower()]
        return ok(page_of([service.populated(b) for b in items], page, limit))

    @app.get("/api/blogs/my")
    async def my_blogs(request: Request, page: int = 1, limit: int = 10) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        items = [service.populated(b) for b in service.blogs if b["author"] == user["_id"]]
        return ok(page_of(items, page, limit))

    @app.get("/api/blogs/{blog_id}")
    async def get_blog(blog_id: str) -> JSONResponse:
        blog = next((b for b in service.blogs if b["_id"] == blog_id), None)
        if blog is None:
            return fail(404, "Blog not found")
        blog["views"] += 1
        return ok({"blog": service.populated(blog)})

    @app.post("/api/blogs")
    async def create_blog(request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        if user["role"] == "reader":
            return fail(403, "User role reader is not authorized to access this route")
        body = await request.json()
        category = next(c for c in service.categories if c["_id"] == body["category"])
        blog_id = service.add_blog(body["title"], category, user)
        blog = next(b for b in service.blogs if b["_id"] == blog_id)
        blog.update(content=body["content"], status=body.get("status", "draft"))
        return ok({"blog": service.populated(blog)}, 201)

    @app.put("/api/blogs/{blog_id}")
    async def update_blog(blog_id: str, request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        blog = next((b for b in service.blogs if b["_id"] == blog_id), None)
        if blog is None:
            return fail(404, "Blog not found")
        if blog["author"] != user["_id"]:
            return fail(403, "Not authorized to update this blog")
        blog.update(await request.json())
        return ok({"blog": service.populated(blog)})

    @app.delete("/api/blogs/{blog_id}")
    async def delete_blog(blog_id: str, request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        blog = next((b for b in service.blogs if b["_id"] == blog_id), None)
        if blog is None:
            return fail(404, "Blog not found")
        service.blogs.remove(blog)
        return ok({})

    @app.get("/api/categories")
    async def categories() -> JSONResponse:
        return ok({"categories": service.categories})

    # --- Engagement ---

    @app.get("/api/comments/blog/{blog_id}")
    async def comments(blog_id: str) -> JSONResponse:
        thread = [c for c in service.comments if c["blog"] == blog_id]
        return ok({"comments": thread})

    @app.post("/api/comments")
    async def post_comment(request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        body = await request.json()
        comment = {
            "_id": service.new_id("m"),
            "content": body["content"],
            "blog": body["blog"],
            "author": {"_id": user["_id"], "username": user["username"]},
            "createdAt": now(),
        }
        service.comments.append(comment)
        return ok({"comment": comment}, 201)

    @app.post("/api/likes")
    async def toggle_like(request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        body = await request.json()
        key = (body["blog"], user["_id"])
        if service.likes.get(key) == body["type"]:
            del service.likes[key]
        else:
            service.likes[key] = body["type"]
        return ok(service.like_status(body["blog"], user["_id"]))

    @app.get("/api/likes/blog/{blog_id}/status")
    async def like_status(blog_id: str, request: Request) -> JSONResponse:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        status = service.like_status(blog_id, user["_id"])
        del status["likeCount"]
        return ok(status)

    # --- Admin ---

    def admin_for(request: Request) -> JSONResponse | None:
        user = service.user_for(request)
        if user is None:
            return fail(401, "Not authorized")
        if user["role"] != "admin":
            return fail(403, f"User role {user['role']} is not authorized to access this route")
        return None

    @app.get("/api/admin/dashboard/stats")
    async def dashboard(request: Request) -> JSONResponse:
        denied = admin_for(request)
        if denied:
            return denied
        return ok(
            {
                "stats": {
                    "totalUsers": len(service.users),
                    "totalBlogs": len(service.blogs),
                    "totalCategories": len(service.categories),
                },
                "recentUsers": list(service.users.values())[-5:],
                "recentBlogs": [service.populated(b) for b in service.blogs[-5:]],
            }
        )

    @app.get("/api/admin/users")
    async def admin_users(request: Request) -> JSONResponse:
        denied = admin_for(request)
        if denied:
            return denied
        return ok({"users": list(service.users.values())})

    @app.put("/api/admin/users/{user_id}")
    async def admin_update_user(user_id: str, request: Request) -> JSONResponse:
        denied = admin_for(request)
        if denied:
            return denied
        user = service.users.get(user_id)
        if user is None:
            return fail(404, "User not found")
        body = await request.json()
        user.update({k: v for k, v in body.items() if k in ("role", "isActive")})
        return ok({"user": user})

    @app.delete("/api/admin/users/{user_id}")
    async def admin_delete_user(user_id: str, request: Request) -> JSONResponse:
        denied = admin_for(request)
        if denied:
            return denied
        if service.users.pop(user_id, None) is None:
            return fail(404, "User not found")
        service.blogs = [b for b in service.blogs if b["author"] != user_id]
        return ok({})

    @app.get("/api/admin/blogs")
    async def admin_blogs(request: Request, page: int = 1, limit: int = 10) -> JSONResponse:
        denied = admin_for(request)
        if denied:
            return denied
        return ok(page_of([service.populated(b) for b in service.blogs], page, limit))

    @app.delete("/api/admin/blogs/{blog_id}")
    async def admin_delete_blog(blog_id: str, request: Request) -> JSONResponse:
        denied = admin_for(request)
        if denied:
            return denied
        blog = next((b for b in service.blogs if b["_id"] == blog_id), None)
        if blog is None:
            return fail(404, "Blog not found")
        service.blogs.remove(blog)
        return ok({})

    return app


# --- Fixtures ---


@pytest.fixture
def service() -> FakeBlogService:
    return FakeBlogService()


@pytest.fixture
def app(service: FakeBlogService) -> FastAPI:
    return create_app(service)


@pytest.fixture
def ctx(app: FastAPI) -> ClientContext:
    """Fully wired client talking to the fake service."""
    rules = ClientRules(api=ApiRules(base_url="http://testserver/api"))
    return ClientContext.create(
        rules,
        transport=httpx.ASGITransport(app=app),
        store=InMemoryCredentialStore(),
        navigator=InMemoryNavigator("/"),
    )
