# Infrastructure Package
from .json_store import JsonStateRepository

__all__ = ["JsonStateRepository"]
