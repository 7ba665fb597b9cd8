from databases import Database

from .users import UserStore
from .sessions import SessionManager
from .subreddits import SubredditStore
from .posts import PostStore
from .comments import CommentStore
from .votes import VoteLedger


class Forum:
    """All components, built over one shared database handle."""

    def __init__(self, database: Database):
        self.database = database
        self.users = UserStore(database)
        self.sessions = SessionManager(database, self.users)
        self.subreddits = SubredditStore(database)
        self.posts = PostStore(database)
        self.comments = CommentStore(database)
        self.votes = VoteLedger(database)


__all__ = [
    "Forum",
    "UserStore",
    "SessionManager",
    "SubredditStore",
    "PostStore",
    "CommentStore",
    "VoteLedger",
]
