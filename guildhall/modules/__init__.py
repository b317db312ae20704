"""
Modules package initialization.
This package contains all the functional modules of the application:
user_management, comments, reactions, follows, events and notifications.
"""
