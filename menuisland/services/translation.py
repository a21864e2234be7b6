"""
Best-effort menu translation with an in-process cache.

Translation never fails a request: when no provider is configured or the
provider errors out, the source text is returned unchanged.
Successful translations are cached per (text, source language) with one
entry per target language.
"""
import asyncio
import logging
import threading
import time
from collections import OrderedDict
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

import httpx

from menuisland.config import Settings, get_settings
from menuisland.services.claude_service import ClaudeService
from menuisland.services.menu_assembler import MenuTree
from menuisland.utils.validators import normalize_language

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = {
    "it": "Italian",
    "en": "English",
    "fr": "French",
    "de": "German",
    "es": "Spanish",
    "pt": "Portuguese",
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ar": "Arabic",
}

GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


def detect_language(
    query_lang: Optional[str],
    accept_language: Optional[str],
    default: str = "it",
) -> str:
    """Pick the menu language: ?lang= first, then Accept-Language, then the default."""
    if query_lang and query_lang.lower() in SUPPORTED_LANGUAGES:
        return query_lang.lower()

    if accept_language:
        for part in accept_language.split(","):
            code = normalize_language(part.split(";")[0], default="")
            if code in SUPPORTED_LANGUAGES:
                return code

    return default


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class TranslationCache:
    """LRU cache of {(text, source_lang): {target_lang: translation}}.

    Bounded by number of source strings; each translation expires after
    ttl_seconds as measured by `clock`. All access goes through one lock so
    concurrent requests cannot corrupt the structure.
    """

    def __init__(
        self,
        max_entries: int = 5000,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[Tuple[str, str], Dict[str, Tuple[str, float]]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, text: str, source_lang: str, target_lang: str) -> Optional[str]:
        key = (text, source_lang)
        with self._lock:
            translations = self._entries.get(key)
            if not translations or target_lang not in translations:
                return None
            value, stored_at = translations[target_lang]
            if self.ttl_seconds is not None and self._clock() - stored_at >= self.ttl_seconds:
                del translations[target_lang]
                if not translations:
                    del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, text: str, source_lang: str, target_lang: str, value: str) -> None:
        key = (text, source_lang)
        with self._lock:
            translations = self._entries.setdefault(key, {})
            translations[target_lang] = (value, self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, text: str, source_lang: str) -> None:
        """Drop every translation of a source string (e.g. after an edit)."""
        with self._lock:
            self._entries.pop((text, source_lang), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class TranslationProvider(Protocol):
    async def translate(self, text: str, target_lang: str, source_lang: str) -> str:
        ...


class GoogleTranslateProvider:
    """Google Cloud Translation v2 (REST, API key)"""

    def __init__(
        self,
        api_key: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """One pooled client for every call, created on first use"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def translate(self, text: str, target_lang: str, source_lang: str) -> str:
        response = await self.client.post(
            GOOGLE_TRANSLATE_URL,
            params={"key": self.api_key},
            json={
                "q": text,
                "source": source_lang,
                "target": target_lang,
                "format": "text",
            },
        )
        response.raise_for_status()
        data = response.json()
        return data["data"]["translations"][0]["translatedText"]

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


TRANSLATION_SYSTEM_PROMPT = """You translate restaurant menu text.
Translate the user's text from {source} to {target}.
Keep dish names that are proper nouns, keep numbers and units as they are.
Reply with the translation only, no quotes and no commentary."""


class ClaudeTranslationProvider:
    """Translation through the Claude API"""

    def __init__(self, claude: ClaudeService):
        self.claude = claude

    async def translate(self, text: str, target_lang: str, source_lang: str) -> str:
        system_prompt = TRANSLATION_SYSTEM_PROMPT.format(
            source=SUPPORTED_LANGUAGES.get(source_lang, source_lang),
            target=SUPPORTED_LANGUAGES.get(target_lang, target_lang),
        )
        translated = await self.claude.generate_response(text, system_prompt=system_prompt)
        translated = translated.strip()
        if not translated:
            raise ValueError("Empty translation returned")
        return translated


def build_translation_provider(settings: Settings) -> Optional[TranslationProvider]:
    """Create the configured provider, or None when translation is not configured."""
    provider = (settings.TRANSLATION_PROVIDER or "none").lower()

    if provider == "google":
        if not settings.GOOGLE_TRANSLATE_API_KEY:
            logger.info("GOOGLE_TRANSLATE_API_KEY not set - menus are served untranslated")
            return None
        return GoogleTranslateProvider(
            settings.GOOGLE_TRANSLATE_API_KEY,
            timeout=settings.TRANSLATION_TIMEOUT_SECONDS,
        )

    if provider == "claude":
        claude = ClaudeService(timeout=settings.TRANSLATION_TIMEOUT_SECONDS)
        if not claude.is_available:
            logger.info("ANTHROPIC_API_KEY not set - menus are served untranslated")
            return None
        return ClaudeTranslationProvider(claude)

    if provider != "none":
        logger.warning(f"Unknown TRANSLATION_PROVIDER '{provider}' - translation disabled")
    return None


# ---------------------------------------------------------------------------
# Translator
# ---------------------------------------------------------------------------

class Translator:
    def __init__(
        self,
        provider: Optional[TranslationProvider],
        cache: TranslationCache,
        source_lang: str = "it",
        timeout: Optional[float] = None,
        max_concurrency: int = 8,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.provider = provider
        self.cache = cache
        self.source_lang = source_lang
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        # Menus fan out one task per string; this caps how many reach the provider at once
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def aclose(self) -> None:
        """Release the provider's HTTP connections"""
        close = getattr(self.provider, "aclose", None)
        if close is not None:
            await close()

    async def translate(self, text: Optional[str], target_lang: str, source_lang: Optional[str] = None) -> Optional[str]:
        source_lang = source_lang or self.source_lang
        if not text or target_lang == source_lang:
            return text

        cached = self.cache.get(text, source_lang, target_lang)
        if cached is not None:
            return cached

        if self.provider is None:
            return text

        try:
            async with self._semaphore:
                # Another task may have filled the cache while this one waited
                cached = self.cache.get(text, source_lang, target_lang)
                if cached is not None:
                    return cached
                translated = await asyncio.wait_for(
                    self.provider.translate(text, target_lang, source_lang),
                    timeout=self.timeout,
                )
        except Exception as e:
            logger.warning(f"Translation {source_lang}->{target_lang} failed, using source text: {e!r}")
            return text

        if not isinstance(translated, str) or not translated:
            return text

        self.cache.set(text, source_lang, target_lang, translated)
        return translated

    async def _translate_fields(self, record: Dict[str, Any], target_lang: str) -> Dict[str, Any]:
        translated = dict(record)
        name, description = await asyncio.gather(
            self.translate(record.get("name"), target_lang),
            self.translate(record.get("description"), target_lang),
        )
        translated["name"] = name
        if "description" in record:
            translated["description"] = description
        return translated

    async def translate_menu_item(self, item: Dict[str, Any], target_lang: str) -> Dict[str, Any]:
        if target_lang == self.source_lang:
            return item
        translated = await self._translate_fields(item, target_lang)
        translated["allergens"] = list(await asyncio.gather(
            *(self._translate_fields(a, target_lang) for a in item.get("allergens") or [])
        ))
        return translated

    async def translate_category(self, category: Dict[str, Any], target_lang: str) -> Dict[str, Any]:
        if target_lang == self.source_lang:
            return category
        translated = await self._translate_fields(category, target_lang)
        translated["items"] = list(await asyncio.gather(
            *(self.translate_menu_item(item, target_lang) for item in category.get("items") or [])
        ))
        return translated

    async def translate_restaurant(self, restaurant: Dict[str, Any], target_lang: str) -> Dict[str, Any]:
        if target_lang == self.source_lang:
            return restaurant
        return await self._translate_fields(restaurant, target_lang)

    async def translate_menu(self, tree: MenuTree, target_lang: str) -> MenuTree:
        """Return a translated copy of the tree; the input is left untouched."""
        if target_lang == self.source_lang:
            return tree
        restaurant, categories = await asyncio.gather(
            self.translate_restaurant(tree.restaurant, target_lang),
            asyncio.gather(*(self.translate_category(c, target_lang) for c in tree.categories)),
        )
        return MenuTree(
            restaurant=restaurant,
            template=tree.template,
            categories=list(categories),
            warnings=list(tree.warnings),
        )


@lru_cache()
def get_translator() -> Translator:
    """Process-wide translator, injected into routes as a dependency."""
    settings = get_settings()
    cache = TranslationCache(
        max_entries=settings.TRANSLATION_CACHE_MAX_ENTRIES,
        ttl_seconds=settings.TRANSLATION_CACHE_TTL_SECONDS,
    )
    return Translator(
        provider=build_translation_provider(settings),
        cache=cache,
        source_lang=settings.SOURCE_LANGUAGE,
        timeout=settings.TRANSLATION_TIMEOUT_SECONDS,
        max_concurrency=settings.TRANSLATION_MAX_CONCURRENCY,
    )
