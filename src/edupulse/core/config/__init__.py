# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for EduPulse.

Example:
    >>> from edupulse.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.analytics.problematic_threshold
    30.0
"""

from edupulse.core.config.settings import (
    AnalyticsSettings,
    APISettings,
    CORSSettings,
    DatabaseSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "CORSSettings",
    "APISettings",
    "AnalyticsSettings",
]
