from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Type
import asyncio
import logging

import aiohttp  # type: ignore

from ..exceptions import TransportBlocked
from ..models import ExtractionResult, Quiz
from ..utils.deep_finder import Candidate, DeepStructuralFinder
from ..utils.diagnostics import DiagnosticSink, NullDiagnosticSink, RunLog
from ..utils.report import DiscoveryReportBuilder
from ..utils.state_extractor import StateExtractor
from ..utils.text_processor import TextProcessor
from .config import ScraperConfig
from .fetch import FetchLadder
from .media import ImageLookupService
from .normalize import PlatformNormalizer


class BasePlatformExtractor(ABC):
    """
    One platform's import flow.

    ``run`` parses the platform id from the URL, then reads each target in
    order through the fetch ladder. The first target whose content yields at
    least one candidate array wins; its best candidate is normalized and the
    run is summarized in a DiscoveryReport.
    """

    platform = ""
    display_name = ""
    normalizer_cls: Type[PlatformNormalizer] = PlatformNormalizer
    title_paths: List[str] = ['title', 'name']
    description_paths: List[str] = ['description']

    def __init__(self, config: ScraperConfig, ladder: FetchLadder,
                 finder: Optional[DeepStructuralFinder] = None,
                 sink: Optional[DiagnosticSink] = None,
                 image_service: Optional[ImageLookupService] = None):
        self.logger = logging.getLogger(self.__class__.__module__)
        self.config = config
        self.ladder = ladder
        self.finder = finder or DeepStructuralFinder.from_config(config.section('finder'))
        self.sink = sink or NullDiagnosticSink()
        self.image_service = image_service

    @abstractmethod
    def parse_id(self, url: str) -> Optional[str]:
        """Extract the platform's quiz id from a URL."""
        pass

    @abstractmethod
    def targets(self, platform_id: str, url: str) -> List[Tuple[str, str]]:
        """Ordered (label, url) pairs to try for one quiz."""
        pass

    def create_normalizer(self) -> PlatformNormalizer:
        min_time, max_time = self.config.time_bounds
        return self.normalizer_cls(min_time=min_time, max_time=max_time)

    def inspect(self, root: Any, questions: List[Any]) -> List[str]:
        """Platform-specific forensic notes about the winning document."""
        return []

    async def run(self, url: str, enrich_images: bool = False) -> ExtractionResult:
        """
        Run the full flow for one URL.

        Args:
            url: Quiz URL already classified as belonging to this platform
            enrich_images: Fill missing images from stock photo APIs

        Returns:
            ExtractionResult: Quiz (None when nothing usable was found) and report
        """
        run_log = RunLog(self.platform, url)
        builder = DiscoveryReportBuilder(self.platform, url)

        platform_id = self.parse_id(url)
        if not platform_id:
            self.logger.warning(f"Could not find a {self.display_name} quiz id in {url}")
            run_log.step('parse_id', ok=False)
            builder.mark_no_structure('invalid_platform_url')
            return self._finish(run_log, builder, None, url)

        run_log.step('parse_id', ok=True, id=platform_id)
        self.logger.info(f"Importing {self.display_name} quiz {platform_id}")

        timeout = aiohttp.ClientTimeout(total=self.ladder.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            return await self._run_targets(url, platform_id, run_log, builder, session, enrich_images)

    async def _run_targets(self, url: str, platform_id: str, run_log: RunLog,
                           builder: DiscoveryReportBuilder, session: aiohttp.ClientSession,
                           enrich_images: bool) -> ExtractionResult:
        min_bytes = self.config.min_bytes_for(self.platform)
        retrieved_any = False

        for label, target_url in self.targets(platform_id, url):
            try:
                fetched = await self.ladder.fetch(target_url, target=label, min_bytes=min_bytes, session=session)
            except TransportBlocked as e:
                builder.add_attempts(e.attempts)
                run_log.step('fetch', target=label, ok=False, attempts=len(e.attempts))
                continue

            retrieved_any = True
            builder.add_attempts(fetched.attempts)
            run_log.step('fetch', target=label, ok=True, agent=fetched.agent, length=len(fetched.content))

            extractor = StateExtractor()
            documents = extractor.extract(fetched.content)
            builder.add_notes([f"{label}: {note}" for note in extractor.notes])
            if not documents:
                builder.add_notes([f"{label}: no_json_documents"])
                run_log.step('extract', target=label, documents=0)
                continue

            ranked = self._rank_candidates(documents)
            run_log.step('find', target=label, documents=len(documents), candidates=len(ranked))
            if not ranked:
                builder.add_notes([f"{label}: no_candidate_arrays"])
                continue

            best, root = ranked[0]
            run_log.agent = fetched.agent
            run_log.strategy = label
            run_log.candidate = best.summary()

            builder.set_winner(fetched.agent, label)
            top_level = list(root.keys()) if isinstance(root, dict) else []
            builder.set_candidates([candidate for candidate, _ in ranked], top_level)

            normalizer = self.create_normalizer()
            questions = normalizer.normalize(root, best.array)
            builder.add_notes(normalizer.notes)
            builder.add_notes(self.inspect(root, questions))

            if enrich_images and questions and self.image_service is not None:
                try:
                    await self.image_service.enrich(questions, session=session)
                except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                    self.logger.warning(f"Image enrichment failed for {url}: {type(e).__name__}: {e}")
                    builder.add_notes([f"image_enrichment_failed: {type(e).__name__}: {e}"])

            quiz = Quiz(
                title=self._lookup_text(root, self.title_paths) or f"{self.display_name} quiz {platform_id}",
                description=self._lookup_text(root, self.description_paths),
                questions=questions,
                platform=self.platform,
                source_url=url
            )
            return self._finish(run_log, builder, quiz, url)

        if retrieved_any:
            builder.mark_no_structure('no_candidate_arrays')
        else:
            builder.mark_blocked()
        return self._finish(run_log, builder, None, url)

    def _rank_candidates(self, documents: List[Tuple[str, Any]]) -> List[Tuple[Candidate, Any]]:
        """Rank candidates across every document, ties kept in discovery order."""
        collected: List[Tuple[Candidate, Any]] = []
        for doc_label, document in documents:
            for candidate in self.finder.find(document, path='$'):
                if len(documents) > 1:
                    candidate.path = f"{doc_label}:{candidate.path}"
                collected.append((candidate, document))
        return sorted(collected, key=lambda pair: pair[0].score, reverse=True)

    def _finish(self, run_log: RunLog, builder: DiscoveryReportBuilder,
                quiz: Optional[Quiz], url: str) -> ExtractionResult:
        report = builder.build(quiz.questions if quiz else None)
        run_log.status = report.status
        for note in report.notes:
            run_log.note(note)
        self.sink.record(run_log)
        return ExtractionResult(quiz=quiz, report=report, handled=True)

    @staticmethod
    def _lookup_text(root: Any, paths: List[str], max_depth: int = 4) -> str:
        """First non-empty text at any of the paths, searched breadth-first."""
        queue: List[Tuple[Any, int]] = [(root, 0)]
        while queue:
            node, depth = queue.pop(0)
            if isinstance(node, dict):
                found = TextProcessor.first_non_empty(node, paths)
                if found:
                    return TextProcessor.clean_text(found, strip_html=True)
                if depth < max_depth:
                    queue.extend((value, depth + 1) for value in node.values() if isinstance(value, dict))
        return ""
