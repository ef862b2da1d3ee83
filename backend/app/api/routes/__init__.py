from . import auth, health, join_requests, notifications, projects, skills, users

__all__ = [
    "auth",
    "health",
    "join_requests",
    "notifications",
    "projects",
    "skills",
    "users",
]
