from enum import Enum


class StudentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ActivityType(str, Enum):
    COURSE_ACCESSED = "course_accessed"
    VIDEO_WATCHED = "video_watched"
    QUIZ_COMPLETED = "quiz_completed"
    QUIZ_STARTED = "quiz_started"
    MATERIAL_VIEWED = "material_viewed"
    LOGIN = "login"
    DASHBOARD_ACCESSED = "dashboard_accessed"


class ResourceKind(str, Enum):
    STUDENTS = "students"
    ACTIVITY_LOGS = "activity_logs"
    ACTIVITY_STATS = "activity_stats"
    LEADERBOARD = "leaderboard"
    PROGRESS_SUMMARIES = "progress_summaries"


class ModerationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    BULK_APPROVE = "bulk_approve"
