from __future__ import annotations

from core.models.dish import WireModel


class RestoreSummaryOut(WireModel):
    dishes_added: int
    dishes_skipped: int
    schedule_added: int
    schedule_skipped: int
    message: str
