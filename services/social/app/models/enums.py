import enum

import sqlalchemy as sa


class ReportTargetType(str, enum.Enum):
    POST = "post"
    COMMENT = "comment"
    EVENT = "event"
    SHOP = "shop"
    REVIEW = "review"
    USER = "user"


class ReportReason(str, enum.Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    HARASSMENT = "harassment"
    COPYRIGHT = "copyright"
    OTHER = "other"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"        # Moderator looked at it; still actionable
    RESOLVED = "resolved"
    DISMISSED = "dismissed"
    AUTO_HIDDEN = "auto_hidden"  # Target crossed the report threshold


class NotificationType(str, enum.Enum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    QUOTE = "quote"
    REPLY = "reply"
    COMMENT_LIKE = "comment_like"
    FOLLOW_REQUEST = "follow_request"
    FOLLOW_REQUEST_APPROVED = "follow_request_approved"


class AdminNotificationType(str, enum.Enum):
    AUTO_HIDDEN = "auto_hidden"


def _values_enum(enum_cls: type[enum.Enum], name: str) -> sa.Enum:
    # Persist the lower-case values rather than the member names.
    return sa.Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


report_target_type_enum = _values_enum(ReportTargetType, "report_target_type")
report_reason_enum = _values_enum(ReportReason, "report_reason")
report_status_enum = _values_enum(ReportStatus, "report_status")
notification_type_enum = _values_enum(NotificationType, "notification_type")
admin_notification_type_enum = _values_enum(AdminNotificationType, "admin_notification_type")
