from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from moto_garage.sdk.models import Listing


class NoticeKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    text: str
    listing_id: str | None = None
    trace_id: str | None = None

    @classmethod
    def success(cls, text: str, listing_id: str | None = None, trace_id: str | None = None) -> "Notice":
        return cls(NoticeKind.SUCCESS, text, listing_id=listing_id, trace_id=trace_id)

    @classmethod
    def error(cls, text: str, listing_id: str | None = None, trace_id: str | None = None) -> "Notice":
        return cls(NoticeKind.ERROR, text, listing_id=listing_id, trace_id=trace_id)

    @property
    def is_error(self) -> bool:
        return self.kind is NoticeKind.ERROR


@dataclass(frozen=True)
class MutationOutcome:
    ok: bool
    listing_id: str
    message: str
    listing: Listing | None = None
    trace_id: str | None = None
    applied: bool = True
