"""Exa search backend — retrieves full-text documents for a query."""

from __future__ import annotations

import logging

import httpx

from corroborate.config import settings
from corroborate.models.source import RetrievedDocument

logger = logging.getLogger(__name__)

EXA_SEARCH_URL = "https://api.exa.ai/search"


class ExaSearch:
    """Search provider backed by the Exa neural search API."""

    name: str = "Exa"

    def __init__(
        self,
        api_key: str | None = None,
        num_results: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.exa_api_key
        self.num_results = num_results or settings.search_results
        self.transport = transport

    async def search(self, query: str) -> list[RetrievedDocument]:
        """Run one search; HTTP failures propagate to the caller."""
        async with httpx.AsyncClient(timeout=60.0, transport=self.transport) as client:
            response = await client.post(
                EXA_SEARCH_URL,
                headers={"x-api-key": self.api_key, "content-type": "application/json"},
                json={
                    "query": query,
                    "numResults": self.num_results,
                    "type": "auto",
                    "contents": {"text": True},
                },
            )
            response.raise_for_status()

        documents = []
        for result in response.json().get("results", []):
            url = result.get("url")
            text = result.get("text") or ""
            if not url or not text.strip():
                logger.debug("Skipping search result without url or text: %s", url)
                continue
            documents.append(
                RetrievedDocument(
                    url=url,
                    title=result.get("title") or url,
                    text=text,
                    published_date=result.get("publishedDate"),
                    author=result.get("author") or None,
                )
            )
        logger.info("Exa returned %d documents for %r", len(documents), query)
        return documents
