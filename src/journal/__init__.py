"""
Journal: append-only JSONL record of checklist evaluations.
"""

from journal.writer import JournalWriter

__all__ = ["JournalWriter"]
