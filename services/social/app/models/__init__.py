from app.models.comment import Comment
from app.models.event import Event
from app.models.moderation import AdminLog, AdminNotification, Report
from app.models.notification import Notification
from app.models.post import Genre, Hashtag, Post, PostGenre, PostHashtag
from app.models.shop import Shop, ShopReview
from app.models.social import Block, Follow, Mute
from app.models.user import User

__all__ = [
    "User",
    "Follow",
    "Block",
    "Mute",
    "Post",
    "Genre",
    "PostGenre",
    "Hashtag",
    "PostHashtag",
    "Comment",
    "Event",
    "Shop",
    "ShopReview",
    "Notification",
    "Report",
    "AdminNotification",
    "AdminLog",
]
