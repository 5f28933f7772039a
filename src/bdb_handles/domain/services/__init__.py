"""Domain services.

Services implement domain logic that doesn't naturally fit within a
single entity.
"""

from bdb_handles.domain.services.error_translator import ErrorTranslator

__all__ = [
    "ErrorTranslator",
]
