"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """System roles."""

    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


class WeekdayEnum(StrEnum):
    """Weekday names accepted in lesson schedules."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class RequestStatusEnum(StrEnum):
    """Tuition request lifecycle status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RequestDecisionEnum(StrEnum):
    """Tutor decision on a pending request."""

    ACCEPT = "accept"
    REJECT = "reject"


class BookingStatusEnum(StrEnum):
    """Booking lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
