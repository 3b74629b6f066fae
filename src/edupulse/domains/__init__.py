# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for EduPulse.

Domains:
    content: Progress tracking and interaction logging (write path).
    analytics: Abandonment, effectiveness and problematic-content reports.
"""
