# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics domain services.

This module provides read-side analyzers over persisted engagement rows:
- Abandonment analytics per content item (interaction log)
- Effectiveness analytics per topic (content counters and progress)
- Problematic-content detection with priority tiers
- Per-item content analytics with an engagement score

Usage:
    from edupulse.domains.analytics import AbandonmentAnalyzer

    analyzer = AbandonmentAnalyzer(repository)
    analytics = await analyzer.get_abandonment_analytics(content_id)
"""

from edupulse.domains.analytics.abandonment import (
    AbandonmentAnalytics,
    AbandonmentAnalyzer,
    average_abandonment_point,
    summarize_abandonment,
)
from edupulse.domains.analytics.content import (
    ContentAnalytics,
    ContentAnalyzer,
    TopicEngagement,
)
from edupulse.domains.analytics.effectiveness import (
    EffectivenessAnalytics,
    EffectivenessAnalyzer,
    EngagedContent,
)
from edupulse.domains.analytics.problematic import (
    ProblematicContent,
    ProblematicContentDetector,
    build_recommendation,
    priority_for_rate,
)

__all__ = [
    # Abandonment
    "AbandonmentAnalyzer",
    "AbandonmentAnalytics",
    "average_abandonment_point",
    "summarize_abandonment",
    # Effectiveness
    "EffectivenessAnalyzer",
    "EffectivenessAnalytics",
    "EngagedContent",
    # Problematic content
    "ProblematicContentDetector",
    "ProblematicContent",
    "priority_for_rate",
    "build_recommendation",
    # Content
    "ContentAnalyzer",
    "ContentAnalytics",
    "TopicEngagement",
]
