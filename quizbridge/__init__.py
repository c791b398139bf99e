"""
quizbridge

Imports quizzes from Kahoot!, Blooket, Wayground (Quizizz) and Gimkit URLs
into one canonical question schema, with a discovery report explaining what
was found and what is missing.
"""

__version__ = "1.0.0"

from .models import DiscoveryReport, ExtractionResult, Option, Question, Quiz
from .scraper.config import ScraperConfig
from .scraper.orchestrator import ExtractionOrchestrator
from .utils.diagnostics import MemoryDiagnosticSink

__all__ = [
    'DiscoveryReport',
    'ExtractionOrchestrator',
    'ExtractionResult',
    'MemoryDiagnosticSink',
    'Option',
    'Question',
    'Quiz',
    'ScraperConfig'
]
