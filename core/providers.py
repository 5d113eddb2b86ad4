"""
Provider registry and interfaces for external dependencies.

This module centralizes translation provider selection so tests can run
without touching the real DeepL API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from core import config
from pdfservice.models import TranslationResult

logger = logging.getLogger(__name__)

DEEPL_FREE_BASE_URL = "https://api-free.deepl.com/v2"
DEEPL_PRO_BASE_URL = "https://api.deepl.com/v2"
_FREE_KEY_SUFFIX = ":fx"


class ProviderError(RuntimeError):
    """Raised when a provider operation fails."""


class TranslationError(ProviderError):
    """Raised when a translation request cannot be completed."""


class TranslationTimeoutError(TranslationError):
    """The translation service did not answer within the request timeout."""


class TranslationServiceError(TranslationError):
    """The translation service rejected the request or returned garbage."""


def is_free_plan_key(auth_key: Optional[str]) -> bool:
    """DeepL free-tier keys carry a ':fx' suffix."""
    return bool(auth_key) and auth_key.endswith(_FREE_KEY_SUFFIX)


def resolve_deepl_base_url(auth_key: Optional[str]) -> str:
    """Return the API base URL matching the credential's plan."""
    return DEEPL_FREE_BASE_URL if is_free_plan_key(auth_key) else DEEPL_PRO_BASE_URL


def deepl_plan(auth_key: Optional[str]) -> str:
    return "Free" if is_free_plan_key(auth_key) else "Pro"


@runtime_checkable
class TranslationClient(Protocol):
    """Translation provider interface."""

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: Optional[str] = None,
    ) -> TranslationResult:
        """Translate one request-sized piece of text."""

    async def list_languages(self, kind: str = "target") -> list[dict[str, Any]]:
        """Return the languages supported by the provider."""


def _extract_error_message(response: httpx.Response) -> str:
    """Pull DeepL's error message out of a failed response when it has one."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or f"HTTP {response.status_code}"


class DeepLClient:
    """Production translation provider backed by the DeepL REST API."""

    def __init__(
        self,
        auth_key: str,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._auth_key = auth_key
        self._base_url = (base_url or resolve_deepl_base_url(auth_key)).rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def is_configured(self) -> bool:
        return bool(self._auth_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: Optional[str] = None,
    ) -> TranslationResult:
        if not self.is_configured():
            raise TranslationServiceError("DEEPL_API_KEY not configured")

        data = {
            "auth_key": self._auth_key,
            "text": text,
            "target_lang": target_lang,
        }
        if source_lang:
            data["source_lang"] = source_lang

        async with self._client() as client:
            try:
                response = await client.post(f"{self._base_url}/translate", data=data)
                response.raise_for_status()
                payload = response.json()
            except httpx.TimeoutException as exc:
                logger.error("DeepL request timed out after %.0fs", self._timeout)
                raise TranslationTimeoutError(
                    "Translation timed out. The text may be too long or the "
                    "translation service too slow."
                ) from exc
            except httpx.HTTPStatusError as exc:
                message = _extract_error_message(exc.response)
                logger.error(
                    "DeepL API returned %s: %s", exc.response.status_code, message
                )
                raise TranslationServiceError(f"Translation failed: {message}") from exc
            except httpx.RequestError as exc:
                logger.error("DeepL API request failed: %s", exc)
                raise TranslationServiceError(f"Translation failed: {exc}") from exc
            except ValueError as exc:
                raise TranslationServiceError(
                    "Translation failed: response was not valid JSON"
                ) from exc

        try:
            first = payload["translations"][0]
            translated = first["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise TranslationServiceError(
                "Translation failed: response did not contain a translation"
            ) from exc

        logger.info("Translation successful. Response length: %d", len(translated))
        return TranslationResult(
            translated_text=translated,
            detected_source_language=first.get("detected_source_language"),
        )

    async def list_languages(self, kind: str = "target") -> list[dict[str, Any]]:
        if not self.is_configured():
            raise TranslationServiceError("DEEPL_API_KEY not configured")

        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self._base_url}/languages",
                    params={"auth_key": self._auth_key, "type": kind},
                )
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException as exc:
                raise TranslationTimeoutError("Language list request timed out") from exc
            except httpx.HTTPStatusError as exc:
                raise TranslationServiceError(
                    f"Language list request failed: {_extract_error_message(exc.response)}"
                ) from exc
            except httpx.RequestError as exc:
                raise TranslationServiceError(
                    f"Language list request failed: {exc}"
                ) from exc
            except ValueError as exc:
                raise TranslationServiceError(
                    "Language list response was not valid JSON"
                ) from exc


class FakeTranslationClient:
    """Translation provider that never calls external APIs.

    Returns the input unchanged, which keeps chunk reassembly observable in tests.
    """

    def __init__(self, detected_source_language: str = "EN") -> None:
        self.detected_source_language = detected_source_language
        self.calls: list[tuple[str, str, Optional[str]]] = []

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: Optional[str] = None,
    ) -> TranslationResult:
        self.calls.append((text, target_lang, source_lang))
        return TranslationResult(
            translated_text=text,
            detected_source_language=source_lang or self.detected_source_language,
        )

    async def list_languages(self, kind: str = "target") -> list[dict[str, Any]]:
        return [
            {"language": "EN-US", "name": "English (American)"},
            {"language": "JA", "name": "Japanese"},
        ]


@dataclass
class ProviderRegistry:
    """Container for active providers."""

    translation_client: TranslationClient


_registry: Optional[ProviderRegistry] = None


def configure_providers(use_fake: Optional[bool] = None) -> ProviderRegistry:
    """
    Configure global provider registry.

    Args:
        use_fake: Force fake/real mode. If omitted, infer from env.
    """
    global _registry

    if use_fake is None:
        use_fake = config.use_fake_providers()

    if use_fake:
        _registry = ProviderRegistry(translation_client=FakeTranslationClient())
    else:
        _registry = ProviderRegistry(
            translation_client=DeepLClient(
                auth_key=config.DEEPL_API_KEY,
                base_url=config.DEEPL_API_URL or None,
                timeout=config.TRANSLATION_TIMEOUT_SECONDS,
            )
        )

    logger.info("Provider registry configured (fake=%s)", use_fake)
    return _registry


def _get_registry() -> ProviderRegistry:
    global _registry
    if _registry is None:
        _registry = configure_providers()
    return _registry


def get_translation_client() -> TranslationClient:
    """Return translation client from active registry."""
    return _get_registry().translation_client


def using_fake_providers() -> bool:
    """Return whether fake providers are currently active."""
    return isinstance(_get_registry().translation_client, FakeTranslationClient)
