"""Shared plumbing for provider clients."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.config import HttpSettings
from app.domain.models import ProviderPage
from app.logging import logger
from app.services.exceptions import ProviderError, ProviderErrorKind
from app.utils.retry import retry_async

ModelT = TypeVar("ModelT", bound=BaseModel)


class VideoProvider(Protocol):
    key: str

    async def fetch(self, query: str, page: int) -> ProviderPage: ...


class _BaseProvider:
    def __init__(
        self,
        key: str,
        http_client: httpx.AsyncClient,
        settings: HttpSettings | None = None,
    ) -> None:
        self.key = key
        self._client = http_client
        self._settings = settings or HttpSettings()

    async def _get(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        operation: str,
    ) -> httpx.Response:
        """GET ``url``, retrying transport failures and mapping every error to ProviderError."""

        request_headers = {"User-Agent": self._settings.user_agent, **(headers or {})}

        async def _request() -> httpx.Response:
            response = await self._client.get(
                url,
                params=params,
                headers=request_headers,
                timeout=self._settings.request_timeout_seconds,
            )
            response.raise_for_status()
            return response

        try:
            return await retry_async(
                _request,
                max_attempts=self._settings.retry_attempts,
                base_delay=self._settings.retry_base_delay,
                retry_on=(httpx.TransportError,),
                logger=logger,
                operation_name=operation,
            )
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                self.key, ProviderErrorKind.HTTP_STATUS, exc.response.status_code
            ) from exc
        except httpx.TimeoutException as exc:
            raise ProviderError(self.key, ProviderErrorKind.TIMEOUT, str(exc) or None) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise ProviderError(
                self.key, ProviderErrorKind.NETWORK_FAILURE, str(exc) or None
            ) from exc

    def _validate(self, model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ProviderError(
                self.key, ProviderErrorKind.SCHEMA_MISMATCH, _error_path(exc)
            ) from exc

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.key, ProviderErrorKind.SCHEMA_MISMATCH, "$") from exc


def _error_path(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "$"
    location = errors[0].get("loc") or ()
    return ".".join(str(part) for part in location) or "$"


__all__ = ["VideoProvider"]
