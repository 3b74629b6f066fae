# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""EduPulse - content progress tracking and engagement analytics service."""

__version__ = "1.0.0"
