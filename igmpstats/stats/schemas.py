"""Pydantic schemas for statistics snapshots, events and HTTP payloads."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from igmpstats.stats.constants import STATISTICS_GENERATION_PERIOD

_NON_COUNTER_FIELDS = frozenset({"taken_at"})


class StatsSnapshot(BaseModel):
    """Immutable point-in-time copy of the IGMP counters."""

    model_config = ConfigDict(frozen=True)

    taken_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    igmp_join_req: int = Field(default=0, ge=0)
    igmp_success_join_rejoin_req: int = Field(default=0, ge=0)
    igmp_fail_join_req: int = Field(default=0, ge=0)
    igmp_leave_req: int = Field(default=0, ge=0)
    igmp_disconnect: int = Field(default=0, ge=0)
    igmpv1_membership_report: int = Field(default=0, ge=0)
    igmpv2_membership_report: int = Field(default=0, ge=0)
    igmpv3_membership_report: int = Field(default=0, ge=0)
    igmpv2_leave_group: int = Field(default=0, ge=0)
    igmpv3_membership_query: int = Field(default=0, ge=0)
    igmp_msg_received: int = Field(default=0, ge=0)
    total_msg_received: int = Field(default=0, ge=0)
    invalid_igmp_msg_received: int = Field(default=0, ge=0)

    def get(self, name: Any) -> int:
        """Return one counter by :class:`CounterName` or its string value."""

        key = getattr(name, "value", name)
        if key in _NON_COUNTER_FIELDS or key not in type(self).model_fields:
            raise KeyError(f"Unknown counter '{key}'")
        return getattr(self, key)

    def counters(self) -> dict[str, int]:
        """Return a fresh ``name -> value`` mapping."""

        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name not in _NON_COUNTER_FIELDS
        }

    def json_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json")


class StatsEventType(str, Enum):
    STATS_UPDATE = "STATS_UPDATE"


class StatsEvent(BaseModel):
    """A published snapshot together with its event discriminator."""

    model_config = ConfigDict(frozen=True)

    type: StatsEventType = StatsEventType.STATS_UPDATE
    sequence: int = Field(..., ge=1)
    subject: StatsSnapshot

    def json_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json")


class PublisherConfigRequest(BaseModel):
    """Body for updating the publish interval; the raw value is resolved later."""

    model_config = ConfigDict(populate_by_name=True)

    statistics_generation_period: Any = Field(default=None, alias=STATISTICS_GENERATION_PERIOD)

    def raw_period(self) -> Any:
        return self.statistics_generation_period


class PublisherStatus(BaseModel):
    active: bool
    period_seconds: int
    listeners: int = Field(..., ge=0)
    ticks_published: int = Field(..., ge=0)
    last_published_at: datetime | None = None
