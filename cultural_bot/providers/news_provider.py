"""
NewsAPI provider for city events and culture headlines.

Free tier: 1000 requests/day. Requires NEWS_API_KEY.
"""

from typing import Any, Dict, List

from cultural_bot.models import FetchResult, NewsArticle
from cultural_bot.providers.base import Provider, ProviderMetadata
from cultural_bot.providers.utils import http_get_json

MAX_ARTICLES = 3


def parse_articles(data: Dict[str, Any], limit: int = MAX_ARTICLES) -> List[NewsArticle]:
    articles = []
    for item in (data.get("articles") or [])[:limit]:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        source_name = (item.get("source") or {}).get("name") or "NewsAPI"
        articles.append(NewsArticle(
            title=item["title"],
            description=item.get("description") or "No description available",
            url=item.get("url"),
            published_at=item.get("publishedAt") or "",
            source=f"{source_name} (LIVE)",
        ))
    return articles


class NewsProvider(Provider):
    """Recent articles about events in a city."""

    async def get_metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="newsapi",
            version="2",
            description="NewsAPI everything search",
            capabilities=["news_search"],
            rate_limit=1000,
        )

    async def city_news(self, city: str, page_size: int = 5) -> FetchResult[List[NewsArticle]]:
        self._require_enabled()
        params = {
            "q": f"{city} events culture",
            "sortBy": "publishedAt",
            "pageSize": page_size,
            "apiKey": self.config.api_key,
        }
        data = await http_get_json(
            f"{self.config.base_url}/everything",
            params=params,
            timeout=self.timeout,
            session=self.session,
            provider_name=self.name,
        )
        if not isinstance(data, dict) or data.get("status") == "error":
            message = data.get("message") if isinstance(data, dict) else "unexpected payload"
            return FetchResult.unavailable(f"NewsAPI error: {message}")
        articles = parse_articles(data)
        if not articles:
            return FetchResult.empty()
        return FetchResult.ok(articles)
