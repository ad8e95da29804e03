"""Draft storage backends."""

from meetspace_wizard.drafts.storage import DraftStore, FileDraftStore, MemoryDraftStore

__all__ = [
    "DraftStore",
    "MemoryDraftStore",
    "FileDraftStore",
]
