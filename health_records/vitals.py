# -*- coding: utf-8 -*-
"""
Vitals series: append-only, typed health measurements per owner.

Values are opaque text. Only the chart helpers look inside them, and only to
pull out the leading number (the systolic part of "120/80").
"""

import re
from datetime import timedelta

from health_records.models import utcnow

_LEADING_NUMBER = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def chart_value(value):
    """Numeric value to plot for a stored reading, or None if there is none.

    >>> chart_value("120/80")
    120.0
    """
    if value is None:
        return None
    head = str(value).split("/", 1)[0]
    m = _LEADING_NUMBER.match(head)
    if not m:
        return None
    return float(m.group(1))


def current_readings(vitals):
    """Most recent vital per type. ``vitals`` must be newest first."""
    latest = {}
    for v in vitals:
        latest.setdefault(v.type, v)
    return list(latest.values())


def chart_series(vitals):
    """Oldest-first ``(vital, number)`` points, skipping unplottable values."""
    points = []
    for v in sorted(vitals, key=lambda v: v.observed_at):
        n = chart_value(v.value)
        if n is not None:
            points.append((v, n))
    return points


class VitalsSeries:

    def __init__(self, store, default_limit=None):
        self.store = store
        self.default_limit = default_limit

    def record_vital(self, actor, type, value, unit, observed_at):
        return self.store.create_vital(actor.id, type, value, unit, observed_at)

    def list_vitals(self, actor, type=None, since_days=None, limit=None, now=None):
        """Actor's vitals, newest ``observed_at`` first.

        ``since_days`` drops readings observed before ``now - since_days``.
        Without any filter the result is capped at ``default_limit``.
        """
        since = None
        if since_days is not None:
            since = (now or utcnow()) - timedelta(days=since_days)
        if limit is None and type is None and since is None:
            limit = self.default_limit
        return self.store.list_vitals(actor.id, type=type, since=since, limit=limit)

    def latest(self, actor):
        return current_readings(self.store.list_vitals(actor.id))
