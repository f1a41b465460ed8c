import math
from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# --- Enums / Literals ---
RoleType = Literal["reader", "author", "admin"]
BlogStatus = Literal["draft", "published"]
LikeType = Literal["like", "dislike"]
ReactionType = Literal["like", "dislike", "none"]


class WireModel(BaseModel):
    """Base for records exchanged with the blog API (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Record(WireModel):
    # The service is backed by MongoDB and answers with `_id`.
    id: str = Field(validation_alias=AliasChoices("_id", "id"))


# --- User & Session ---

class UserSummary(Record):
    username: str
    email: str = ""
    role: RoleType = "reader"
    avatar: str = ""
    bio: str = ""
    created_at: datetime | None = None


class AuthorSummary(Record):
    username: str = ""
    avatar: str = ""
    bio: str = ""


class SessionCredential(WireModel):
    token: str
    user: UserSummary


# --- Taxonomy ---

class Category(Record):
    name: str
    color: str = ""
    description: str = ""
    blog_count: int = Field(default=0, ge=0)


# --- Content ---

class Blog(Record):
    title: str
    content: str = ""
    excerpt: str = ""
    category: Category | str | None = None
    author: AuthorSummary | str | None = None
    tags: list[str] = Field(default_factory=list)
    featured_image: str = ""
    status: BlogStatus = "draft"
    views: int = Field(default=0, ge=0)
    likes: list[Any] = Field(default_factory=list)
    read_time: int = Field(default=0, ge=0)
    created_at: datetime | None = None

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def category_id(self) -> str | None:
        if isinstance(self.category, Category):
            return self.category.id
        return self.category

    @property
    def author_id(self) -> str | None:
        if isinstance(self.author, AuthorSummary):
            return self.author.id
        return self.author


class Pagination(WireModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, gt=0)
    total: int = Field(default=0, ge=0)
    pages: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def derive_pages(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("pages") is None:
            data = dict(data)
            total = int(data.get("total") or 0)
            limit = int(data.get("limit") or 10)
            data["pages"] = math.ceil(total / limit) if limit > 0 else 0
        return data


class BlogPage(WireModel):
    blogs: list[Blog] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


# --- Engagement ---

class Comment(Record):
    content: str
    author: AuthorSummary | str | None = None
    blog: str | None = None
    created_at: datetime | None = None

    @field_validator("blog", mode="before")
    @classmethod
    def blog_ref(cls, value: Any) -> Any:
        # Populated references come back as objects; only the id matters here.
        if isinstance(value, dict):
            return value.get("_id") or value.get("id")
        return value


class EngagementStatus(WireModel):
    is_liked: bool = False
    like_type: ReactionType = "none"
    like_count: int = Field(default=0, ge=0)

    @field_validator("like_type", mode="before")
    @classmethod
    def none_when_missing(cls, value: Any) -> Any:
        return "none" if value in (None, "") else value


# --- Administration ---

class ManagedUser(UserSummary):
    """A user record as the admin endpoints return it."""

    is_active: bool = True


class SiteTotals(WireModel):
    total_users: int = Field(default=0, ge=0)
    total_blogs: int = Field(default=0, ge=0)
    total_categories: int = Field(default=0, ge=0)


class DashboardStats(WireModel):
    stats: SiteTotals = Field(default_factory=SiteTotals)
    recent_users: list[ManagedUser] = Field(default_factory=list)
    recent_blogs: list[Blog] = Field(default_factory=list)
