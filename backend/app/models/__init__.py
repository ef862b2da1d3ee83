from app.models.join_request import JoinRequest, JoinRequestEvent, JoinRequestStatus, current_status_subquery
from app.models.notification import Notification, NotificationType
from app.models.project import Project, ProjectStatus, ProjectVisibility
from app.models.project_interest import ProjectInterest
from app.models.project_member import MEMBER_ROLE, OWNER_ROLE, ProjectMember
from app.models.project_task import ProjectTask
from app.models.refresh_token import RefreshToken
from app.models.skill import Skill, SkillCategory, project_skills, user_skills
from app.models.user import User

__all__ = [
    "JoinRequest",
    "JoinRequestEvent",
    "JoinRequestStatus",
    "MEMBER_ROLE",
    "Notification",
    "NotificationType",
    "OWNER_ROLE",
    "Project",
    "ProjectInterest",
    "ProjectMember",
    "ProjectStatus",
    "ProjectTask",
    "ProjectVisibility",
    "RefreshToken",
    "Skill",
    "SkillCategory",
    "User",
    "current_status_subquery",
    "project_skills",
    "user_skills",
]
