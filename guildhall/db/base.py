# Import all models here so Base.metadata knows every table
from guildhall.db.session import Base

from guildhall.modules.user_management.models.user import User
from guildhall.modules.comments.models.comment import Comment
from guildhall.modules.reactions.models.reaction import Reaction
from guildhall.modules.follows.models.follow import Follow, FollowRequest
from guildhall.modules.events.models.event import Event, EventRegistration
from guildhall.modules.notifications.models.notification import Notification
