"""
Walk through the post service against a local PostgreSQL.

Connection settings come from BLOG_* environment variables (see
blog_service.config); by default postgres:postgres@localhost:5432/blog.
"""

import asyncio

from blog_service import DatabaseManager, PostService, UserService, ValidationError
from blog_service.config import get_settings
from blog_service.logging_config import setup_logging
from blog_service.schema import create_schema, truncate_all


async def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    await DatabaseManager.connect_from_settings(settings)
    try:
        await create_schema(settings.db_name)
        await truncate_all(settings.db_name)

        users = UserService(db_name=settings.db_name)
        posts = PostService(db_name=settings.db_name)

        author = await users.create_user({"username": "daniel", "password": "hunter2"})
        print(f"👤 Created user {author.username} ({author.id})")

        for title, tags in [
            ("Learning Redux", ["redux"]),
            ("Learn React Hooks", ["react"]),
            ("Full-Stack React Projects", ["react", "nodejs"]),
        ]:
            await posts.create_post(author.id, {"title": title, "tags": tags})

        print("📰 Newest first:")
        for post in await posts.list_all_posts():
            print(f"   {post.created_at:%H:%M:%S.%f}  {post.title}  {post.tags}")

        react = await posts.list_posts_by_tag("react")
        print(f"🏷️  Tagged 'react': {[p.title for p in react]}")

        first = react[-1]
        updated = await posts.update_post(first.id, author.id, {"contents": "Hooks all the way"})
        print(f"✏️  Updated '{updated.title}', updated_at moved to {updated.updated_at}")

        try:
            await posts.create_post(author.id, {"title": "   "})
        except ValidationError as e:
            print(f"❌ Rejected post: {e.field} {e.kind}")

        result = await posts.delete_post(first.id, author.id)
        print(f"🗑️  Deleted {result.deleted_count} post(s)")
    finally:
        await DatabaseManager.disconnect(settings.db_name)


if __name__ == "__main__":
    asyncio.run(main())
