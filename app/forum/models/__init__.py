from app.forum.models.discussion import Discussion, DiscussionCategory, DiscussionSort
from app.forum.models.discussion_tag import DiscussionTag
from app.forum.models.reply import Reply, ReplyVote, VoteType

__all__ = [
    "Discussion",
    "DiscussionCategory",
    "DiscussionSort",
    "DiscussionTag",
    "Reply",
    "ReplyVote",
    "VoteType",
]
