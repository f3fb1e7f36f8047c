#!/usr/bin/env python3
"""
Seed database with a few users, follows and posts for local development.
"""

import asyncio
import os
import sys

# Add parent directory to path
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select

from socialnet.config import settings
from socialnet.core.security import security_manager
from socialnet.database import Database
from socialnet.models.post import Post
from socialnet.models.user import Follow, Role, User

USERS = [
    {"username": "admin", "first_name": "Ada", "last_name": "Admin", "role": Role.ADMIN},
    {"username": "alice", "first_name": "Alice", "last_name": "Moreau", "role": Role.USER},
    {"username": "bob", "first_name": "Bob", "last_name": "Kline", "role": Role.USER},
    {"username": "carol", "first_name": "Carol", "last_name": "Ng", "role": Role.USER},
]

FOLLOWS = [("bob", "alice"), ("carol", "alice"), ("alice", "bob")]

POSTS = [
    ("alice", "Sunday league recap", "sports", "We finally won a match.", False),
    ("alice", "Sourdough attempt #3", "cooking", "Better crumb this time.", False),
    ("bob", "Anyone else tired?", "life", "Long week.", True),
    ("carol", "Trail running in the rain", "sports", "Muddy but worth it.", False),
]


async def seed_data():
    """Seed the database with initial data."""
    print("🌱 Starting database seeding...")

    database = Database.from_settings(settings)
    await database.create_all()

    async with database.session() as session:
        try:
            # 1. Users
            print("👤 Checking users...")
            users = {}
            for data in USERS:
                result = await session.execute(
                    select(User).where(User.username == data["username"])
                )
                user = result.scalar_one_or_none()

                if not user:
                    user = User(
                        email=f"{data['username']}@example.com",
                        hashed_password=security_manager.create_password_hash("password123"),
                        is_email_verified=True,
                        **data,
                    )
                    session.add(user)
                    await session.commit()
                    await session.refresh(user)
                    print(f"✅ Created user {user.username} (ID: {user.id})")

                users[user.username] = user

            # 2. Follows
            print("🤝 Checking follows...")
            for follower, followed in FOLLOWS:
                result = await session.execute(
                    select(Follow).where(
                        Follow.follower_id == users[follower].id,
                        Follow.followed_id == users[followed].id,
                    )
                )
                if not result.scalar_one_or_none():
                    session.add(
                        Follow(follower_id=users[follower].id, followed_id=users[followed].id)
                    )
            await session.commit()

            # 3. Posts
            print("📝 Checking posts...")
            count = 0
            for author, title, topic, description, is_anonymous in POSTS:
                result = await session.execute(select(Post).where(Post.title == title))
                if result.scalar_one_or_none():
                    continue

                session.add(
                    Post(
                        title=title,
                        topic=topic,
                        description=description,
                        is_anonymous=is_anonymous,
                        author_id=users[author].id,
                    )
                )
                count += 1

            if count > 0:
                await session.commit()
                print(f"✅ Added {count} new posts")
            else:
                print("ℹ️  Posts already seeded")

            print("✨ Seeding completed successfully!")

        except Exception as e:
            print(f"❌ Error during seeding: {e}")
            raise

    await database.dispose()


if __name__ == "__main__":
    asyncio.run(seed_data())
