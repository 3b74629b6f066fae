# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Canonical enumerations for content progress and interactions.

These are the only spellings used inside the domain. Legacy storage
formats (e.g. upper-case progress statuses) are converted by the
repository, never by business logic.
"""

from enum import Enum


class ProgressStatus(str, Enum):
    """Per-user progress state of a content item."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAUSED = "paused"


class InteractionAction(str, Enum):
    """User action recorded in the interaction log."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    COMPLETE = "complete"
    ABANDON = "abandon"


class DeviceType(str, Enum):
    """Device the interaction happened on."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class PlatformType(str, Enum):
    """Client platform the interaction happened on."""

    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class AbandonmentReason(str, Enum):
    """Reason reported with an abandon action."""

    TECHNICAL_ISSUES = "technical_issues"
    CONTENT_DIFFICULTY = "content_difficulty"
    LOST_INTEREST = "lost_interest"
    OTHER = "other"


class CameFrom(str, Enum):
    """Where the user navigated to the content from."""

    HOME = "home"
    SEARCH = "search"
    RECOMMENDATION = "recommendation"
    TOPIC = "topic"
    BOOKMARK = "bookmark"
    OTHER = "other"


class ContentType(str, Enum):
    """Kind of content item."""

    VIDEO = "video"
    ARTICLE = "article"
    QUIZ = "quiz"
    INTERACTIVE = "interactive"
    OTHER = "other"


class PriorityTier(str, Enum):
    """Severity tier assigned to problematic content."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
