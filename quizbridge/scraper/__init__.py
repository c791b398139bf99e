"""
Import flows for third-party quiz platforms.

This package contains the fetch ladder, the platform normalizers and
extractors, and the orchestrator that routes a URL to one of them.
"""

from .base import BasePlatformExtractor
from .config import ScraperConfig
from .fetch import FetchLadder, build_agents
from .orchestrator import ExtractionOrchestrator

__all__ = [
    'BasePlatformExtractor',
    'ExtractionOrchestrator',
    'FetchLadder',
    'ScraperConfig',
    'build_agents'
]
