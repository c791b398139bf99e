"""
Extraction Orchestrator

Routes a URL to exactly one platform flow through a fixed-priority dispatch
table and returns the flow's quiz and discovery report. URLs no flow claims
are declined without any network access.
"""

import logging
import re
from typing import Dict, List, Optional
from urllib.parse import urlparse

from ..constants import PLATFORM_PATTERNS, REPORT_STATUS, USER_AGENTS
from ..models import DiscoveryReport, ExtractionResult
from ..utils.bot_detector import BotDetector
from ..utils.deep_finder import DeepStructuralFinder
from ..utils.diagnostics import DiagnosticSink, NullDiagnosticSink
from .base import BasePlatformExtractor
from .config import ScraperConfig
from .fetch import FetchAgent, FetchLadder, build_agents
from .media import ImageLookupService
from .platforms import PLATFORM_EXTRACTORS


class ExtractionOrchestrator:
    """
    Entry point of the import pipeline.

    One orchestrator can serve many sequential ``extract`` calls; every call
    builds fresh records and only the diagnostic sink is shared.
    """

    def __init__(self, config: Optional[ScraperConfig] = None, sink: Optional[DiagnosticSink] = None,
                 agents: Optional[List[FetchAgent]] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Pipeline settings, defaults when omitted
            sink: Diagnostic sink receiving one record per run
            agents: Fetch agents overriding the configured ladder
        """
        self.logger = logging.getLogger(__name__)
        self.config = config or ScraperConfig(config_path=None)
        self.sink = sink or NullDiagnosticSink()

        fetch_config = self.config.section('fetch')
        detector = BotDetector(prefix_chars=self.config.section('detector').get('prefix_chars'))
        if agents is None:
            agents = build_agents(
                self.config.fetch_agents,
                user_agent=fetch_config.get('user_agent') or USER_AGENTS[0],
                timeout_seconds=self.config.timeout_seconds
            )
        self.ladder = FetchLadder(
            agents,
            detector=detector,
            timeout_seconds=self.config.timeout_seconds,
            min_bytes=int(fetch_config.get('min_bytes', 500))
        )
        self.finder = DeepStructuralFinder.from_config(self.config.section('finder'))

        enrichment = self.config.section('enrichment')
        self.image_service = ImageLookupService(
            pexels_api_key=self.config.api_key('pexels'),
            pixabay_api_key=self.config.api_key('pixabay'),
            requests_per_minute=int(enrichment.get('requests_per_minute', 20)),
            query_words=int(enrichment.get('query_words', 3))
        )
        self.enrich_by_default = bool(enrichment.get('images_enabled', False))

        self._patterns = [
            (name, [re.compile(pattern, re.IGNORECASE) for pattern in patterns])
            for name, patterns in PLATFORM_PATTERNS
        ]
        self.extractors: Dict[str, BasePlatformExtractor] = {
            name: extractor_cls(self.config, self.ladder, self.finder, self.sink, self.image_service)
            for name, extractor_cls in PLATFORM_EXTRACTORS.items()
        }

    def classify(self, url: str) -> Optional[str]:
        """
        Find the platform that handles a URL.

        Args:
            url: Candidate quiz URL

        Returns:
            Platform id, or None for relative, malformed or unknown URLs
        """
        if not isinstance(url, str) or not url.strip():
            return None
        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return None

        for name, patterns in self._patterns:
            if any(pattern.search(url) for pattern in patterns):
                return name
        return None

    async def extract(self, url: str, enrich_images: Optional[bool] = None) -> ExtractionResult:
        """
        Import a quiz from a URL.

        Args:
            url: Absolute quiz URL
            enrich_images: Fill missing images from stock photo APIs; defaults to settings

        Returns:
            ExtractionResult: Always carries a report; ``handled`` is False when
            no platform flow claims the URL
        """
        platform = self.classify(url)
        if platform is None:
            self.logger.info(f"No platform flow handles {url}")
            report = DiscoveryReport(platform="", source_url=url or "", status=REPORT_STATUS['not_handled'])
            report.missing['reasons'] = ['platform_unrecognized']
            return ExtractionResult(quiz=None, report=report, handled=False)

        if enrich_images is None:
            enrich_images = self.enrich_by_default

        self.logger.info(f"Routing {url} to {platform}")
        return await self.extractors[platform].run(url.strip(), enrich_images=enrich_images)
