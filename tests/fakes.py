"""
Offline stand-ins for fetch agents.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Union

from quizbridge.scraper.config import ScraperConfig
from quizbridge.scraper.fetch import FetchAgent, FetchResponse

Reply = Union[str, Dict[str, Any], List[Any], Exception, FetchResponse]


class FakeAgent(FetchAgent):
    """
    Serves canned responses keyed by URL substring.

    Strings are returned as 200 bodies, dicts and lists as JSON bodies,
    exceptions are raised. URLs matching no key get a 404.
    """

    kind = 'fake'

    def __init__(self, name: str = 'Fake', replies: Optional[Dict[str, Reply]] = None,
                 default: Optional[Reply] = None, delay: float = 0):
        super().__init__(name=name)
        self.replies = replies or {}
        self.default = default
        self.delay = delay
        self.calls: List[str] = []

    async def fetch(self, url, session) -> FetchResponse:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)

        reply = self.default
        for key, value in self.replies.items():
            if key in url:
                reply = value
                break

        if reply is None:
            return FetchResponse(status=404, text='not found')
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, FetchResponse):
            return reply
        if isinstance(reply, (dict, list)):
            return FetchResponse(status=200, text=json.dumps(reply), content_type='application/json')
        return FetchResponse(status=200, text=reply, content_type='text/html')


def small_payload_config(**extra) -> ScraperConfig:
    """Defaults with tiny payload thresholds so test fixtures pass the size check."""
    overrides = {
        'fetch': {
            'min_bytes': 10,
            'platform_min_bytes': {'kahoot': 10, 'blooket': 10, 'wayground': 10, 'gimkit': 10}
        }
    }
    overrides.update(extra)
    return ScraperConfig.from_dict(overrides)


CHALLENGE_PAGE = (
    "<html><head><title>Just a moment...</title></head>"
    "<body><div id='challenge-form'>Verify you are human</div></body></html>"
)
