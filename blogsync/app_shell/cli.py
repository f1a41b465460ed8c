import argparse
import asyncio
import getpass
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from blogsync.app_shell.context import ClientContext
from blogsync.components.resources import BlogChanges, BlogDraft, BlogFilter
from blogsync.components.session import LoginInput, RegisterInput, UpdateProfileInput
from blogsync.domain.entities import Blog, LikeType
from blogsync.rules.loader import resolve_rules

logger = logging.getLogger("cli")

Handler = Callable[[ClientContext, argparse.Namespace], Awaitable[int]]


def _print_blog_line(blog: Blog) -> None:
    print(f"{blog.id}  [{blog.status}]  {blog.title}")
    print(f"    {blog.like_count} likes, {blog.views} views, {blog.read_time} min read")


async def handle_login(ctx: ClientContext, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    result = await ctx.session.login(LoginInput(email=args.email, password=password))
    if not result.success or result.user is None:
        logger.error(f"Login failed: {result.error}")
        return 1
    print(f"Logged in as {result.user.username} ({result.user.role})")
    return 0


async def handle_register(ctx: ClientContext, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    confirm = args.password or getpass.getpass("Confirm password: ")
    result = await ctx.session.register(
        RegisterInput(
            username=args.username,
            email=args.email,
            password=password,
            role=args.role,
            confirm_password=confirm,
        )
    )
    if not result.success or result.user is None:
        logger.error(f"Registration failed: {result.error}")
        return 1
    print(f"Registered {result.user.username} ({result.user.role})")
    return 0


async def handle_logout(ctx: ClientContext, args: argparse.Namespace) -> int:
    ctx.session.logout()
    print("Logged out.")
    return 0


async def handle_whoami(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    user = ctx.session.user
    if user is None:
        print("Not logged in.")
        return 1
    print(f"{user.username} <{user.email}> ({user.role})")
    return 0


async def handle_list(ctx: ClientContext, args: argparse.Namespace) -> int:
    limit = args.limit or ctx.rules.pagination.default_limit
    flt = BlogFilter(search=args.search, category=args.category, page=args.page, limit=limit)
    result = await ctx.resources.list_blogs(flt)
    if not result.success or result.pagination is None:
        logger.error(f"Could not list blogs: {result.error}")
        return 1
    for blog in result.blogs:
        _print_blog_line(blog)
    p = result.pagination
    print(f"Page {p.page}/{p.pages} ({p.total} total)")
    return 0


async def handle_mine(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    limit = args.limit or ctx.rules.pagination.default_limit
    result = await ctx.resources.get_mine(BlogFilter(page=args.page, limit=limit))
    if not result.success or result.pagination is None:
        logger.error(f"Could not list your blogs: {result.error}")
        return 1
    for blog in result.blogs:
        _print_blog_line(blog)
    p = result.pagination
    print(f"Page {p.page}/{p.pages} ({p.total} total)")
    return 0


async def handle_show(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    result = await ctx.resources.get_by_id(args.blog_id)
    blog = result.blog
    if not result.success or blog is None:
        logger.error(result.error or "Blog post not found")
        return 1

    comments = await ctx.engagement.load_comments(blog.id)
    status = await ctx.engagement.load_engagement_status(blog.id, like_count=blog.like_count)

    print(blog.title)
    print("=" * len(blog.title))
    if blog.tags:
        print("Tags: " + ", ".join(blog.tags))
    print()
    print(blog.content)
    print()
    if status.status is not None:
        print(f"Likes: {status.status.like_count}  (your reaction: {status.status.like_type})")
    print(f"Comments ({len(comments.comments)}):")
    for comment in comments.comments:
        print(f"  - {comment.content}")
    return 0


async def handle_like(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    like_type: LikeType = "dislike" if args.dislike else "like"
    result = await ctx.engagement.toggle_like(args.blog_id, like_type)
    if not result.success or result.status is None:
        logger.error(f"Could not react: {result.error}")
        return 1
    print(f"Reaction: {result.status.like_type} ({result.status.like_count} likes)")
    return 0


async def handle_comment(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    result = await ctx.engagement.post_comment(args.blog_id, args.content)
    if not result.success or result.comment is None:
        logger.error(f"Could not comment: {result.error}")
        return 1
    print(f"Comment {result.comment.id} posted.")
    return 0


def _split_tags(raw: str | None) -> tuple[str, ...] | None:
    if raw is None:
        return None
    return tuple(t.strip() for t in raw.split(",") if t.strip())


async def handle_create(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    draft = BlogDraft(
        title=args.title,
        content=args.content,
        category=args.category,
        excerpt=args.excerpt or "",
        tags=_split_tags(args.tags) or (),
        status="published" if args.publish else "draft",
    )
    result = await ctx.resources.create(draft)
    if not result.success or result.blog is None:
        logger.error(f"Could not create blog: {result.error}")
        return 1
    print(f"Created {result.blog.id} [{result.blog.status}]")
    return 0


async def handle_update(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    changes = BlogChanges(
        title=args.title,
        content=args.content,
        excerpt=args.excerpt,
        category=args.category,
        tags=_split_tags(args.tags),
        status=args.status,
    )
    result = await ctx.resources.update(args.blog_id, changes)
    if not result.success or result.blog is None:
        logger.error(f"Could not update blog: {result.error}")
        return 1
    print(f"Updated {result.blog.id} [{result.blog.status}]")
    return 0


async def handle_delete(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    result = await ctx.resources.delete(args.blog_id)
    if not result.success:
        logger.error(f"Could not delete blog: {result.error}")
        return 1
    print(f"Deleted {args.blog_id}")
    return 0


async def handle_profile(ctx: ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.bootstrap()
    changes = UpdateProfileInput(username=args.username, bio=args.bio, avatar=args.avatar)
    result = await ctx.session.update_profile(changes)
    if not result.success or result.user is None:
        logger.error(f"Could not update profile: {result.error}")
        return 1
    print(f"Profile saved for {result.user.username}")
    return 0


HANDLERS: dict[str, Handler] = {
    "login": handle_login,
    "register": handle_register,
    "logout": handle_logout,
    "whoami": handle_whoami,
    "list": handle_list,
    "mine": handle_mine,
    "show": handle_show,
    "like": handle_like,
    "comment": handle_comment,
    "create": handle_create,
    "update": handle_update,
    "delete": handle_delete,
    "profile": handle_profile,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="blogsync - blog client")
    parser.add_argument("--rules", type=Path, help="Path to rules.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Sign in")
    login_parser.add_argument("email")
    login_parser.add_argument("--password", help="Prompted for when omitted")

    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("username")
    register_parser.add_argument("email")
    register_parser.add_argument("--role", choices=["reader", "author", "admin"], default="reader")
    register_parser.add_argument("--password", help="Prompted for when omitted")

    subparsers.add_parser("logout", help="Sign out")
    subparsers.add_parser("whoami", help="Show the signed-in user")

    list_parser = subparsers.add_parser("list", help="List published blogs")
    list_parser.add_argument("--search")
    list_parser.add_argument("--category")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--limit", type=int)

    mine_parser = subparsers.add_parser("mine", help="List your own blogs")
    mine_parser.add_argument("--page", type=int, default=1)
    mine_parser.add_argument("--limit", type=int)

    show_parser = subparsers.add_parser("show", help="Show one blog with its comments")
    show_parser.add_argument("blog_id")

    like_parser = subparsers.add_parser("like", help="Toggle your like on a blog")
    like_parser.add_argument("blog_id")
    like_parser.add_argument("--dislike", action="store_true")

    comment_parser = subparsers.add_parser("comment", help="Comment on a blog")
    comment_parser.add_argument("blog_id")
    comment_parser.add_argument("content")

    create_parser = subparsers.add_parser("create", help="Write a new blog")
    create_parser.add_argument("title")
    create_parser.add_argument("content")
    create_parser.add_argument("--category", required=True, help="Category id")
    create_parser.add_argument("--excerpt")
    create_parser.add_argument("--tags", help="Comma-separated")
    create_parser.add_argument(
        "--publish", action="store_true", help="Publish instead of saving a draft"
    )

    update_parser = subparsers.add_parser("update", help="Edit one of your blogs")
    update_parser.add_argument("blog_id")
    update_parser.add_argument("--title")
    update_parser.add_argument("--content")
    update_parser.add_argument("--excerpt")
    update_parser.add_argument("--category")
    update_parser.add_argument("--tags", help="Comma-separated")
    update_parser.add_argument("--status", choices=["draft", "published"])

    delete_parser = subparsers.add_parser("delete", help="Delete one of your blogs")
    delete_parser.add_argument("blog_id")

    profile_parser = subparsers.add_parser("profile", help="Update your profile")
    profile_parser.add_argument("--username")
    profile_parser.add_argument("--bio")
    profile_parser.add_argument("--avatar")

    return parser


async def run(args: argparse.Namespace) -> int:
    try:
        rules = resolve_rules(args.rules)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 2

    if not args.verbose:
        logging.getLogger().setLevel(rules.logging.level)

    ctx = ClientContext.create(rules)
    try:
        return await HANDLERS[args.command](ctx, args)
    finally:
        await ctx.aclose()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
