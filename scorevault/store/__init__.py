from .filesystem import FilesystemStorage
from .interface import MemoryStorage, Storage

__all__ = ["FilesystemStorage", "MemoryStorage", "Storage"]
