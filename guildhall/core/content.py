"""
Polymorphic content references.
A comment or reaction points at any content item through the pair
(content_id, content_type). The pair is not a foreign key: each feature
resolves the id within its own tables, and only the type is checked here.
"""
from enum import Enum


class ContentType(str, Enum):
    FORUM_THREAD = "FORUM_THREAD"
    FORUM_REPLY = "FORUM_REPLY"
    LFG_POST = "LFG_POST"
    NEWS_POST = "NEWS_POST"
    USER = "USER"
    NEWS = "NEWS"
    POST = "POST"
    EVENT = "EVENT"
    COMMENT = "COMMENT"
