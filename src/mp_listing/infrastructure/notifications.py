"""Follower notifications written on listing creation.

One INSERT ... SELECT fans the notification out to every follower.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_NOTIFY_FOLLOWERS_SQL = text("""
    INSERT INTO notifications (user_id, type, title, message, link_url)
    SELECT f.follower_user_id, 'new_post', :title, :message, :link_url
    FROM follows f
    WHERE f.followed_user_id = :followed_user_id
""")


class FollowerNotifier:
    async def notify_followers(
        self,
        db: AsyncSession,
        followed_user_id: str,
        title: str,
        message: str,
        link_url: str,
    ) -> int:
        result = await db.execute(
            _NOTIFY_FOLLOWERS_SQL,
            {
                "followed_user_id": followed_user_id,
                "title": title,
                "message": message,
                "link_url": link_url,
            },
        )
        return result.rowcount  # type: ignore[attr-defined]
