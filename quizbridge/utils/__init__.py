"""
Utility modules for the quiz import pipeline.

This package contains utility classes and functions for:
- Challenge page detection
- Question array discovery and embedded state extraction
- Text processing and question type classification
- Discovery reports and diagnostic sinks
- Validation, CSV output and rate limiting
"""

from .bot_detector import BotDetector, is_blocked
from .deep_finder import Candidate, DeepStructuralFinder, find_image_refs
from .state_extractor import StateExtractor
from .text_processor import TextProcessor, clean_text, strip_html
from .question_classifier import QuestionClassifier, detect_question_type
from .diagnostics import LoggingDiagnosticSink, MemoryDiagnosticSink, NullDiagnosticSink, RunLog
from .report import DiscoveryReportBuilder
from .validation import DataValidator
from .csv_handler import CSVHandler
from .rate_limiter import RateLimiter

__all__ = [
    'BotDetector',
    'Candidate',
    'CSVHandler',
    'DataValidator',
    'DeepStructuralFinder',
    'DiscoveryReportBuilder',
    'LoggingDiagnosticSink',
    'MemoryDiagnosticSink',
    'NullDiagnosticSink',
    'QuestionClassifier',
    'RateLimiter',
    'RunLog',
    'StateExtractor',
    'TextProcessor',
    'clean_text',
    'detect_question_type',
    'find_image_refs',
    'is_blocked',
    'strip_html'
]
