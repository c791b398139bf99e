"""
Canonical records produced by the import pipeline.

Every record is created fresh per extraction run and handed to the caller;
nothing here is persisted or shared between runs. ``to_dict`` renders the
camelCase contract consumed by the authoring UI and the import-quality
indicator.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import DEFAULT_QUESTION_TEXT, QUESTION_TYPES, REPORT_STATUS
from .exceptions import NoStructureFound, PartialData, PlatformUnrecognized, TransportBlocked


def new_id() -> str:
    """Generate a short opaque identifier."""
    return uuid.uuid4().hex[:10]


@dataclass
class Option:
    id: str
    text: str
    image_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {'id': self.id, 'text': self.text}
        if self.image_url:
            data['imageUrl'] = self.image_url
        return data


@dataclass
class Question:
    """
    One normalized quiz question.

    ``correct_option_ids`` is always a subset of the option ids, kept in
    option order; ``correct_option_id`` mirrors its first element or is
    empty when no correct answer could be determined.
    """

    id: str
    text: str
    options: List[Option] = field(default_factory=list)
    correct_option_id: str = ""
    correct_option_ids: List[str] = field(default_factory=list)
    image_url: str = ""
    time_limit: int = 20
    question_type: str = QUESTION_TYPES['multiple_choice']
    explanation: str = ""
    reconstructed: bool = False
    source_evidence: str = ""
    needs_enhance_ai: bool = False
    enhance_reason: Optional[str] = None

    def __post_init__(self):
        if not self.text or not str(self.text).strip():
            self.text = DEFAULT_QUESTION_TEXT

    @property
    def option_ids(self) -> List[str]:
        return [option.id for option in self.options]

    def correct_texts(self) -> List[str]:
        by_id = {option.id: option.text for option in self.options}
        return [by_id[option_id] for option_id in self.correct_option_ids if option_id in by_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'text': self.text,
            'options': [option.to_dict() for option in self.options],
            'correctOptionId': self.correct_option_id,
            'correctOptionIds': list(self.correct_option_ids),
            'imageUrl': self.image_url,
            'timeLimit': self.time_limit,
            'questionType': self.question_type,
            'explanation': self.explanation,
            'reconstructed': self.reconstructed,
            'sourceEvidence': self.source_evidence,
            'needsEnhanceAI': self.needs_enhance_ai,
            'enhanceReason': self.enhance_reason
        }


@dataclass
class Quiz:
    title: str
    questions: List[Question] = field(default_factory=list)
    description: str = ""
    platform: str = ""
    source_url: str = ""

    @property
    def flagged_questions(self) -> List[Question]:
        return [question for question in self.questions if question.needs_enhance_ai]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'description': self.description,
            'platform': self.platform,
            'sourceUrl': self.source_url,
            'questions': [question.to_dict() for question in self.questions]
        }


@dataclass
class FetchAttempt:
    """Outcome of one fetch agent reading one target URL."""

    agent: str
    target: str
    url: str
    outcome: str = ""
    status: int = 0
    length: int = 0
    content_type: str = ""
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'agent': self.agent,
            'target': self.target,
            'url': self.url,
            'outcome': self.outcome,
            'status': self.status,
            'length': self.length,
            'contentType': self.content_type,
            'error': self.error
        }


@dataclass
class DiscoveryReport:
    """Structured diagnostic record of one extraction run."""

    platform: str
    source_url: str
    status: str = REPORT_STATUS['not_handled']
    strategy: str = ""
    agent: str = ""
    blocked: bool = False
    parse_ok: bool = False
    questions_found: int = 0
    flagged_questions: int = 0
    has_choices: bool = False
    has_correct_flags: bool = False
    has_images: bool = False
    missing: Dict[str, Any] = field(default_factory=lambda: {
        'options': True, 'correct': True, 'image': True, 'reasons': []
    })
    attempts: List[FetchAttempt] = field(default_factory=list)
    candidates_top5: List[Dict[str, Any]] = field(default_factory=list)
    selected_path: str = ""
    top_level_keys: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'platform': self.platform,
            'sourceUrl': self.source_url,
            'status': self.status,
            'strategy': self.strategy,
            'agent': self.agent,
            'blocked': self.blocked,
            'parseOk': self.parse_ok,
            'questionsFound': self.questions_found,
            'flaggedQuestions': self.flagged_questions,
            'hasChoices': self.has_choices,
            'hasCorrectFlags': self.has_correct_flags,
            'hasImages': self.has_images,
            'missing': {
                'options': self.missing.get('options', False),
                'correct': self.missing.get('correct', False),
                'image': self.missing.get('image', False),
                'reasons': list(self.missing.get('reasons', []))
            },
            'attempts': [attempt.to_dict() for attempt in self.attempts],
            'candidatesTop5': list(self.candidates_top5),
            'selectedPath': self.selected_path,
            'topLevelKeys': list(self.top_level_keys),
            'notes': list(self.notes)
        }


@dataclass
class ExtractionResult:
    """Pair returned by the orchestrator: the quiz (or None) and its report."""

    quiz: Optional[Quiz]
    report: DiscoveryReport
    handled: bool = True

    @property
    def ok(self) -> bool:
        return self.quiz is not None and self.report.status in (
            REPORT_STATUS['success'], REPORT_STATUS['partial']
        )

    def raise_for_status(self, allow_partial: bool = True) -> None:
        """
        Raise the matching pipeline exception for a failed or partial run.

        Args:
            allow_partial: When False, a quiz with flagged questions raises PartialData
        """
        status = self.report.status
        if status == REPORT_STATUS['not_handled']:
            raise PlatformUnrecognized(f"No platform flow handles {self.report.source_url}")
        if status == REPORT_STATUS['blocked']:
            raise TransportBlocked(
                f"All fetch agents failed for {self.report.source_url}",
                attempts=self.report.attempts
            )
        if status in (REPORT_STATUS['no_structure'], REPORT_STATUS['parsed_empty']):
            raise NoStructureFound(
                f"No question structure found for {self.report.source_url}",
                reason=status
            )
        if status == REPORT_STATUS['partial'] and not allow_partial:
            raise PartialData(
                f"{self.report.flagged_questions} question(s) need repair",
                flagged=self.report.flagged_questions
            )
