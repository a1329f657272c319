from __future__ import annotations

import datetime as dt

from pydantic import Field

from core.export import ExportFormat, ExportKind
from core.models.dish import WireModel


class ExportItemIn(WireModel):
    kind: ExportKind
    format: ExportFormat = ExportFormat.txt
    # falls back to the configured default for this kind when omitted
    list_name: str | None = None


class ExportRequest(WireModel):
    start: dt.date
    end: dt.date
    items: list[ExportItemIn] = Field(..., examples=[[{"kind": "grocery", "format": "txt"}]])


class ExportFileOut(WireModel):
    filename: str
    media_type: str
    content: str
