# Models package: importing it registers every table on Base.metadata
from daygrid.models.interaction import Comment, Like
from daygrid.models.post import Post
from daygrid.models.profile import Profile

__all__ = ["Comment", "Like", "Post", "Profile"]
