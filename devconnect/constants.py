"""Global constants for the devconnect application."""

# Firestore limits a single batch to 500 writes
FIRESTORE_BATCH_LIMIT = 400

# Collection names
USERS_COLLECTION = "users"
PROJECTS_COLLECTION = "projects"
MESSAGES_COLLECTION = "messages"
NOTIFICATIONS_COLLECTION = "notifications"

# Projects
PROJECT_ROLES = ("Frontend", "Backend", "Fullstack", "Designer", "DevOps", "Mobile")
PROJECT_STATUSES = ("Idea", "In Progress", "Completed")
DEFAULT_PROJECT_STATUS = "Idea"

# Join requests
JOIN_PENDING = "pending"
JOIN_ACCEPTED = "accepted"
JOIN_REJECTED = "rejected"
JOIN_DECISIONS = (JOIN_ACCEPTED, JOIN_REJECTED)

# Messages
MESSAGE_TYPES = ("text", "file")
DIRECT_ROOM_SEPARATOR = "-"

# Notifications
NOTIFICATION_JOIN_REQUEST = "project_join_request"
NOTIFICATION_JOIN_APPROVED = "project_join_approved"
NOTIFICATION_JOIN_REJECTED = "project_join_rejected"
NOTIFICATION_PROJECT_COMMENT = "project_comment"
NOTIFICATION_PROJECT_UPDATE = "project_update"
NOTIFICATION_MESSAGE = "message"
NOTIFICATION_GENERAL = "general"
NOTIFICATION_TYPES = (
    NOTIFICATION_JOIN_REQUEST,
    NOTIFICATION_JOIN_APPROVED,
    NOTIFICATION_JOIN_REJECTED,
    NOTIFICATION_PROJECT_COMMENT,
    NOTIFICATION_PROJECT_UPDATE,
    NOTIFICATION_MESSAGE,
    NOTIFICATION_GENERAL,
)
RELATED_MODELS = ("Project", "User", "Message")

# Real-time events
EVENT_RECEIVE_MESSAGE = "receive-message"
EVENT_NEW_NOTIFICATION = "new-notification"

# User profile fields editable through PUT /api/users/profile
PROFILE_FIELDS = (
    "bio",
    "skills",
    "experience",
    "github",
    "portfolio",
    "avatar",
    "phone",
    "location",
    "website",
    "linkedin",
    "twitter",
)
