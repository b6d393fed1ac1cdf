"""Alert schemas."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class AlertSeverity(str, Enum):
    """Alert severity levels, most urgent first."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


SEVERITY_RANK = {
    AlertSeverity.CRITICAL: 0,
    AlertSeverity.WARNING: 1,
    AlertSeverity.INFO: 2,
    AlertSeverity.SUCCESS: 3,
}


class AlertCategory(str, Enum):
    """Alert categories."""

    CAPACITY = "capacity"
    COST = "cost"
    COMPLIANCE = "compliance"
    RENEWAL = "renewal"
    ACTION = "action"


class Alert(BaseModel):
    """Proactive alert raised from one analysis cycle.

    Ids are generated fresh each cycle; alerts are neither deduplicated
    nor persisted.
    """

    id: str = Field(default_factory=lambda: f"alert-{uuid.uuid4().hex[:12]}")
    severity: AlertSeverity
    category: AlertCategory
    title: str
    description: str
    metric: str | None = None
    action_label: str | None = None
    action_type: str | None = None  # navigate, bulk-action, external
    action_target: str | None = None  # utilisation, issues, optimisation, users, costs
    created_at: datetime = Field(default_factory=datetime.utcnow)
