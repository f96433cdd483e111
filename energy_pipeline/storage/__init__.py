"""Storage backends for pipeline artifacts and subscribers."""

from .base import Storage, SubscriberStore
from .memory import MemoryStorage
from .supabase_storage import SupabaseStorage

__all__ = ["MemoryStorage", "Storage", "SubscriberStore", "SupabaseStorage"]
