"""
Discovery Report Builder

Aggregates fetch attempts, candidate rankings, notes and the normalized
questions of one run into a DiscoveryReport.
"""

import logging
from collections import Counter
from typing import Any, List, Optional

from ..constants import REPORT_STATUS
from ..models import DiscoveryReport, FetchAttempt, Question


class DiscoveryReportBuilder:
    """
    Builds one DiscoveryReport per extraction run.

    Failure tags are added through ``mark_*`` methods as the run progresses;
    ``build`` derives coverage, missing flags and the final status.
    """

    def __init__(self, platform: str, source_url: str):
        self.logger = logging.getLogger(__name__)
        self.report = DiscoveryReport(platform=platform, source_url=source_url)
        self._failure_reasons: List[str] = []

    def add_attempts(self, attempts: List[FetchAttempt]) -> 'DiscoveryReportBuilder':
        self.report.attempts.extend(attempts)
        return self

    def add_notes(self, notes: List[str]) -> 'DiscoveryReportBuilder':
        for note in notes:
            if note not in self.report.notes:
                self.report.notes.append(note)
        return self

    def set_winner(self, agent: str, strategy: str) -> 'DiscoveryReportBuilder':
        self.report.agent = agent
        self.report.strategy = strategy
        self.report.parse_ok = True
        return self

    def set_candidates(self, candidates: List[Any], top_level_keys: Optional[List[str]] = None
                       ) -> 'DiscoveryReportBuilder':
        self.report.candidates_top5 = [candidate.summary() for candidate in candidates[:5]]
        if candidates:
            self.report.selected_path = candidates[0].path
        if top_level_keys is not None:
            self.report.top_level_keys = list(top_level_keys)[:30]
        return self

    def mark_blocked(self) -> 'DiscoveryReportBuilder':
        self.report.blocked = True
        self._add_reason(REPORT_STATUS['blocked'])
        return self

    def mark_no_structure(self, reason: str = "") -> 'DiscoveryReportBuilder':
        self._add_reason(REPORT_STATUS['no_structure'])
        if reason and reason != REPORT_STATUS['no_structure']:
            self._add_reason(reason)
        return self

    def _add_reason(self, reason: str) -> None:
        if reason not in self._failure_reasons:
            self._failure_reasons.append(reason)

    def build(self, questions: Optional[List[Question]] = None) -> DiscoveryReport:
        """
        Finalize the report.

        Args:
            questions: Normalized questions, None when no candidate was normalized

        Returns:
            DiscoveryReport
        """
        report = self.report
        questions = questions or []

        report.questions_found = len(questions)
        report.flagged_questions = sum(1 for q in questions if q.needs_enhance_ai)
        report.has_choices = any(len(q.options) >= 2 for q in questions)
        report.has_correct_flags = any(q.correct_option_ids for q in questions)
        report.has_images = any(
            q.image_url or any(option.image_url for option in q.options) for q in questions
        )

        reasons = list(self._failure_reasons)
        if report.blocked:
            report.status = REPORT_STATUS['blocked']
        elif REPORT_STATUS['no_structure'] in reasons:
            report.status = REPORT_STATUS['no_structure']
        elif not questions:
            report.status = REPORT_STATUS['parsed_empty']
            reasons.append(REPORT_STATUS['parsed_empty'])
        elif report.flagged_questions:
            report.status = REPORT_STATUS['partial']
        else:
            report.status = REPORT_STATUS['success']

        counts = Counter(q.enhance_reason for q in questions if q.needs_enhance_ai and q.enhance_reason)
        for reason, count in counts.items():
            reasons.append(f"{reason}: {count}/{len(questions)} questions")

        report.missing = {
            'options': not report.has_choices,
            'correct': not report.has_correct_flags,
            'image': not report.has_images,
            'reasons': reasons
        }

        self.logger.info(
            f"{report.platform} report: status={report.status} questions={report.questions_found} "
            f"flagged={report.flagged_questions} agent={report.agent or '-'} strategy={report.strategy or '-'}"
        )
        return report
