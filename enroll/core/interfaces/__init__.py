"""
Interface definitions for enroll services.
"""

from .fetcher import FetchResult, IPageFetcher
from .logger import ILogger

__all__ = [
    "FetchResult",
    "ILogger",
    "IPageFetcher",
]
