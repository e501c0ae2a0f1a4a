"""Claude analyst backend — Anthropic API via httpx."""

from __future__ import annotations

import logging

import httpx

from corroborate.backends.base import FactAnalysis, parse_fact_analysis
from corroborate.config import settings
from corroborate.errors import EnrichmentUnavailable
from corroborate.models.synthesis import SynthesizedContent

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
MAX_DOCUMENT_CHARS = 12000

ANALYSIS_PROMPT = """\
You are a fact extraction assistant. Given a single web document, extract the \
verifiable facts it contains.

Respond with valid JSON in this exact format:
{
  "keyFacts": [
    {
      "claim": "A specific factual claim from the document.",
      "confidence": 0.8,
      "category": "statistic",
      "evidence": "The sentence the claim was taken from.",
      "entities": ["Named entities mentioned in the claim"]
    }
  ],
  "summary": "Two or three sentences summarizing the document.",
  "credibilityAssessment": "One sentence on how trustworthy the document is.",
  "mainTopics": ["topic"],
  "sentiment": "positive | negative | neutral"
}

Rules:
- category is one of: statistic, claim, quote, definition, relationship.
- confidence is between 0.0 and 1.0.
- Only extract claims the document actually makes.\
"""

NARRATIVE_PROMPT = """\
You are a research writer. Given a research query and a structured synthesis of \
themes, timeline events, statistics and controversies, write a concise narrative \
of two to four paragraphs. Mention disagreements explicitly. Respond with plain \
prose only, no JSON and no headings.\
"""


class ClaudeAnalyst:
    """Fact analyzer and narrative writer using Anthropic's Claude API."""

    name: str = "Claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self.timeout = timeout or settings.enrichment_timeout
        self.transport = transport

    async def analyze(self, text: str, url: str) -> FactAnalysis:
        """Extract key facts from one document."""
        user_content = f"Document URL: {url}\n\n{text[:MAX_DOCUMENT_CHARS]}"
        raw_text = await self._complete(ANALYSIS_PROMPT, user_content, max_tokens=4000)
        analysis = parse_fact_analysis(raw_text)
        logger.info("Claude returned %d facts for %s", len(analysis.key_facts), url)
        return analysis

    async def write(self, query: str, synthesis: SynthesizedContent) -> str:
        """Write a prose narrative for a finished synthesis."""
        raw_text = await self._complete(
            NARRATIVE_PROMPT, self._build_synthesis_input(query, synthesis), max_tokens=2000
        )
        narrative = raw_text.strip()
        if not narrative:
            raise EnrichmentUnavailable("Claude returned an empty narrative")
        return narrative

    async def _complete(self, system: str, user_content: str, max_tokens: int) -> str:
        if not self.api_key:
            raise EnrichmentUnavailable("No Anthropic API key configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    ANTHROPIC_API_URL,
                    headers={
                        "x-api-key": self.api_key,
                        "anthropic-version": ANTHROPIC_VERSION,
                        "content-type": "application/json",
                    },
                    json={
                        "model": self.model,
                        "max_tokens": max_tokens,
                        "system": system,
                        "messages": [{"role": "user", "content": user_content}],
                    },
                )
                response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise EnrichmentUnavailable(f"Claude request failed: {exc}") from exc

        for block in data.get("content", []):
            if block.get("type") == "text":
                return block.get("text", "")
        raise EnrichmentUnavailable("Claude response had no text block")

    def _build_synthesis_input(self, query: str, synthesis: SynthesizedContent) -> str:
        parts = [f"Research query: {query}", "\n--- Themes ---"]
        for theme in synthesis.key_themes:
            parts.append(
                f"\n[{theme.label}] consensus: {theme.consensus.value}, "
                f"{len(theme.source_ids)} source(s)"
            )
            for evidence in theme.evidence[:5]:
                parts.append(f"- {evidence.claim}")
        if synthesis.timeline:
            parts.append("\n--- Timeline ---")
            parts.extend(f"- {event.date}: {event.event}" for event in synthesis.timeline)
        if synthesis.statistics:
            parts.append("\n--- Statistics ---")
            parts.extend(f"- {stat.value} ({stat.metric})" for stat in synthesis.statistics)
        if synthesis.controversies:
            parts.append("\n--- Controversies ---")
            for controversy in synthesis.controversies:
                parts.append(f"\n{controversy.topic}")
                parts.extend(f"- {p.position}" for p in controversy.conflicting_positions)
        return "\n".join(parts)
