"""Re-export individual schema modules for easy imports."""

from .auth import TokenRequest, TokenOut
from .schedule import PlaceDishIn, MoveDishIn, ChangeMealTypeIn, ServingsDeltaIn, MutationOut
from .export import ExportItemIn, ExportRequest, ExportFileOut
from .backup import RestoreSummaryOut

__all__ = [
    "TokenRequest",
    "TokenOut",
    "PlaceDishIn",
    "MoveDishIn",
    "ChangeMealTypeIn",
    "ServingsDeltaIn",
    "MutationOut",
    "ExportItemIn",
    "ExportRequest",
    "ExportFileOut",
    "RestoreSummaryOut",
]
