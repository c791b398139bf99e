"""
Fetch Resilience Ladder.

A fixed, ordered list of independent fetch agents is tried one at a time
until one returns usable content. Each attempt is a single bounded-timeout
read; challenge pages, HTTP errors and too-small payloads all advance the
ladder to the next agent.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp  # type: ignore
from playwright.async_api import async_playwright

from ..constants import BROWSER_HEADERS, FETCH_DEFAULTS, FETCH_OUTCOMES, USER_AGENTS
from ..exceptions import TransportBlocked
from ..models import FetchAttempt
from ..utils.bot_detector import BotDetector


@dataclass
class FetchResponse:
    status: int
    text: str
    content_type: str = ""
    url: str = ""


@dataclass
class LadderResult:
    """Content returned by the first agent that succeeded."""

    content: str
    agent: str
    target: str
    attempts: List[FetchAttempt] = field(default_factory=list)


class FetchAgent:
    """One way of reading a URL. Subclasses implement ``fetch``."""

    kind = 'direct'

    def __init__(self, name: str, template: str = "{url}", headers: Optional[Dict[str, str]] = None,
                 enabled: bool = True, user_agent: str = USER_AGENTS[0]):
        self.name = name
        self.template = template
        self.headers = dict(headers or {})
        self.enabled = enabled
        self.user_agent = user_agent

    def build_url(self, url: str) -> str:
        return self.template.format(url=url, url_encoded=quote(url, safe=''))

    def request_headers(self) -> Dict[str, str]:
        headers = dict(BROWSER_HEADERS)
        headers['User-Agent'] = self.user_agent
        headers.update(self.headers)
        return headers

    async def fetch(self, url: str, session: aiohttp.ClientSession) -> FetchResponse:
        target = self.build_url(url)
        async with session.get(target, headers=self.request_headers(), allow_redirects=True) as response:
            text = await response.text(errors='replace')
            return FetchResponse(
                status=response.status,
                text=text,
                content_type=response.headers.get('Content-Type', ''),
                url=str(response.url)
            )


class DirectAgent(FetchAgent):
    """Plain GET with browser-like headers."""

    kind = 'direct'


class ProxyAgent(FetchAgent):
    """Public CORS tunnel that returns the upstream body as-is."""

    kind = 'proxy'


class ReaderAgent(FetchAgent):
    """Render-to-readable-text service."""

    kind = 'reader'


class WrapperAgent(FetchAgent):
    """Tunnel that wraps the upstream body in a JSON envelope."""

    kind = 'wrapper'

    async def fetch(self, url: str, session: aiohttp.ClientSession) -> FetchResponse:
        wrapped = await super().fetch(url, session)
        if not 200 <= wrapped.status < 300:
            return wrapped

        envelope = json.loads(wrapped.text)
        contents = envelope.get('contents') or ''
        status = envelope.get('status') or {}
        return FetchResponse(
            status=int(status.get('http_code') or wrapped.status),
            text=contents,
            content_type=status.get('content_type') or wrapped.content_type,
            url=wrapped.url
        )


class BrowserAgent(FetchAgent):
    """Local headless Chromium, used as the last resort."""

    kind = 'browser'

    def __init__(self, *args, timeout_seconds: float = FETCH_DEFAULTS['timeout_seconds'], **kwargs):
        super().__init__(*args, **kwargs)
        self.timeout_seconds = timeout_seconds

    async def fetch(self, url: str, session: aiohttp.ClientSession) -> FetchResponse:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            try:
                context = await browser.new_context(user_agent=self.user_agent)
                page = await context.new_page()
                response = await page.goto(
                    self.build_url(url),
                    wait_until='domcontentloaded',
                    timeout=int(self.timeout_seconds * 1000)
                )
                text = await page.content()
                return FetchResponse(
                    status=response.status if response else 200,
                    text=text,
                    content_type='text/html',
                    url=page.url
                )
            finally:
                await browser.close()


AGENT_KINDS = {
    'direct': DirectAgent,
    'proxy': ProxyAgent,
    'reader': ReaderAgent,
    'wrapper': WrapperAgent,
    'browser': BrowserAgent
}


def build_agents(agent_configs: List[Dict[str, Any]], user_agent: str = USER_AGENTS[0],
                 timeout_seconds: float = FETCH_DEFAULTS['timeout_seconds']) -> List[FetchAgent]:
    """
    Build the ordered agent ladder from configuration.

    Args:
        agent_configs: Agent definitions (name, kind, template, headers, enabled)
        user_agent: User-Agent header sent by every agent
        timeout_seconds: Per-attempt timeout (used directly by the browser agent)

    Returns:
        List[FetchAgent]: Enabled agents in configured order
    """
    logger = logging.getLogger(__name__)
    agents: List[FetchAgent] = []

    for agent_config in agent_configs:
        if not agent_config.get('enabled', True):
            continue
        kind = agent_config.get('kind', 'direct')
        agent_cls = AGENT_KINDS.get(kind)
        if agent_cls is None:
            logger.warning(f"Unknown fetch agent kind '{kind}' for {agent_config.get('name')}, skipping")
            continue

        kwargs = {
            'name': agent_config.get('name', kind),
            'template': agent_config.get('template', '{url}'),
            'headers': agent_config.get('headers'),
            'user_agent': agent_config.get('user_agent', user_agent)
        }
        if agent_cls is BrowserAgent:
            kwargs['timeout_seconds'] = timeout_seconds
        agents.append(agent_cls(**kwargs))

    return agents


class FetchLadder:
    """
    Tries agents strictly in order and stops at the first usable response.

    Outcome per attempt, checked in this order: an exception or timeout is a
    network error; a challenge page is blocked; a non-2xx status is a network
    error; a body whose UTF-8 size does not exceed the minimum is
    insufficient; anything else is a success.
    """

    def __init__(self, agents: List[FetchAgent], detector: Optional[BotDetector] = None,
                 timeout_seconds: float = FETCH_DEFAULTS['timeout_seconds'],
                 min_bytes: int = FETCH_DEFAULTS['min_bytes']):
        self.logger = logging.getLogger(__name__)
        self.agents = list(agents)
        self.detector = detector or BotDetector()
        self.timeout_seconds = timeout_seconds
        self.min_bytes = min_bytes

    async def fetch(self, url: str, target: str = 'page', min_bytes: Optional[int] = None,
                    session: Optional[aiohttp.ClientSession] = None) -> LadderResult:
        """
        Read one target URL through the ladder.

        Args:
            url: Target URL
            target: Label recorded on every attempt (endpoint or strategy name)
            min_bytes: Override for the minimum payload size
            session: Shared HTTP session, created per call when omitted

        Returns:
            LadderResult: Winning content and every attempt made

        Raises:
            TransportBlocked: If no agent returned usable content
        """
        if session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            async with aiohttp.ClientSession(timeout=timeout) as own_session:
                return await self._run(url, target, min_bytes, own_session)
        return await self._run(url, target, min_bytes, session)

    async def _run(self, url: str, target: str, min_bytes: Optional[int],
                   session: aiohttp.ClientSession) -> LadderResult:
        threshold = self.min_bytes if min_bytes is None else min_bytes
        attempts: List[FetchAttempt] = []

        for agent in self.agents:
            attempt, text = await self._attempt(agent, url, target, threshold, session)
            attempts.append(attempt)

            if attempt.outcome == FETCH_OUTCOMES['success']:
                self.logger.info(f"[{target}] {agent.name} succeeded ({attempt.length} bytes)")
                return LadderResult(
                    content=text,
                    agent=agent.name,
                    target=target,
                    attempts=attempts
                )

            self.logger.warning(f"[{target}] {agent.name} failed: {attempt.outcome} {attempt.error}".rstrip())

        self.logger.error(f"[{target}] All {len(attempts)} fetch agents failed for {url}")
        raise TransportBlocked(f"All fetch agents failed for {url}", attempts=attempts)

    async def _attempt(self, agent: FetchAgent, url: str, target: str, threshold: int,
                       session: aiohttp.ClientSession) -> Tuple[FetchAttempt, str]:
        attempt = FetchAttempt(agent=agent.name, target=target, url=url)

        try:
            response = await asyncio.wait_for(agent.fetch(url, session), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            attempt.outcome = FETCH_OUTCOMES['network_error']
            attempt.error = f"timeout after {self.timeout_seconds:g}s"
            return attempt, ''
        except Exception as e:
            attempt.outcome = FETCH_OUTCOMES['network_error']
            attempt.error = f"{type(e).__name__}: {e}"
            return attempt, ''

        text = response.text or ''
        attempt.status = response.status
        size = len(text.encode('utf-8'))
        attempt.length = size
        attempt.content_type = response.content_type

        marker = self.detector.matched_marker(text)
        if marker:
            attempt.outcome = FETCH_OUTCOMES['blocked']
            attempt.error = f"challenge marker: {marker}"
        elif not 200 <= response.status < 300:
            attempt.outcome = FETCH_OUTCOMES['network_error']
            attempt.error = f"HTTP {response.status}"
        elif size <= threshold:
            attempt.outcome = FETCH_OUTCOMES['insufficient']
            attempt.error = f"{size} bytes <= {threshold}"
        else:
            attempt.outcome = FETCH_OUTCOMES['success']
            return attempt, text

        return attempt, ''
