"""
HTTP client for the Mayar payment gateway.

Requests go through ``httpx`` with a bearer API key. Server errors, rate
limiting and network failures are retried with a linearly growing delay
(``retry_delay``, ``2 * retry_delay``, ...); other 4xx answers fail at once.
"""

import logging

import httpx
from django.conf import settings
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from .exceptions import PaymentConfigurationError, PaymentProviderError

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, PaymentProviderError) and exc.status_code is not None:
        return exc.status_code >= 500 or exc.status_code == 429
    return False


class MayarClient:
    """
    Thin wrapper around the Mayar REST API.

    Args:
        api_key: Bearer key, defaults to ``settings.MAYAR_API_KEY``
        base_url: API root, defaults to ``settings.MAYAR_API_URL``
        timeout: Seconds per request
        max_attempts: Attempts per call including the first one
        retry_delay: Base delay in seconds between attempts
        transport: Optional ``httpx`` transport (tests use ``MockTransport``)
    """

    def __init__(
        self,
        api_key=None,
        base_url=None,
        timeout=None,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        transport=None,
    ):
        self.api_key = api_key if api_key is not None else settings.MAYAR_API_KEY
        self.base_url = (base_url or settings.MAYAR_API_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.MAYAR_TIMEOUT
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.transport = transport

    def _client(self) -> httpx.Client:
        if not self.api_key:
            raise PaymentConfigurationError("MAYAR_API_KEY is not configured")
        return httpx.Client(
            base_url=self.base_url,
            headers={
                'Authorization': f'Bearer {self.api_key}',
                'Content-Type': 'application/json',
            },
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    def _send(self, client: httpx.Client, method: str, endpoint: str, payload=None) -> dict:
        response = client.request(method, endpoint, json=payload)
        if response.is_error:
            raise PaymentProviderError(
                f"Mayar API error: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise PaymentProviderError("Mayar API returned invalid JSON") from e

    def _request(self, method: str, endpoint: str, payload=None) -> dict:
        retryer = Retrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            before_sleep=lambda state: logger.warning(
                "Mayar %s %s failed, retry %d/%d",
                method, endpoint, state.attempt_number, self.max_attempts,
            ),
            reraise=True,
        )
        with self._client() as client:
            try:
                return retryer(self._send, client, method, endpoint, payload)
            except httpx.TransportError as e:
                raise PaymentProviderError(f"Mayar API unreachable: {e}") from e

    def create_invoice(self, payload: dict) -> dict:
        """
        Create a checkout invoice.

        Returns:
            The ``data`` object of the answer, containing ``transactionId``
            and ``link``

        Raises:
            PaymentProviderError: On API failure or when either field is missing
        """
        body = self._request('POST', '/invoice/create', payload)
        data = body.get('data') or {}
        if not data.get('transactionId') or not data.get('link'):
            raise PaymentProviderError(
                "Invalid response from Mayar API - missing transactionId or link"
            )
        return data

    def get_invoice(self, invoice_id: str) -> dict:
        body = self._request('GET', f'/invoice/{invoice_id}')
        return body.get('data') or {}
