"""HTTP client for the URL classification oracle."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import httpx

from ..constants import DEFAULT_BENIGN_LABELS, DEFAULT_CLASSIFIER_URL
from ..errors import ClassificationUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationVerdict:
    """Verdict returned by the oracle for a single URL."""

    prediction: str
    is_benign: bool
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"prediction": self.prediction, **({"metadata": self.metadata} if self.metadata else {})}


class ClassificationClient:
    """
    Calls the classification oracle over HTTP.

    Provides:
    - Shared httpx client with a bounded timeout
    - A typed verdict instead of the raw JSON payload
    - One error type for every way the oracle can fail to answer

    No retries happen here; a failed call surfaces as
    ClassificationUnavailableError and never as a "benign" verdict.
    """

    user_agent: str = "PhishLedger/1.0"

    def __init__(
        self,
        endpoint: str = DEFAULT_CLASSIFIER_URL,
        timeout_seconds: float = 10.0,
        benign_labels: Optional[Iterable[str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        labels = benign_labels if benign_labels is not None else DEFAULT_BENIGN_LABELS
        self.benign_labels = frozenset(str(label).strip().lower() for label in labels if str(label).strip())
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def classify(self, url: str) -> ClassificationVerdict:
        """
        Ask the oracle to classify a URL.

        Raises:
            ClassificationUnavailableError: timeout, transport error, non-2xx
                status, or a payload without a string ``prediction``.
        """
        client = await self._get_client()
        try:
            resp = await client.post(self.endpoint, json={"url": url})
        except httpx.TimeoutException:
            raise ClassificationUnavailableError(
                f"Classifier timed out after {self.timeout_seconds}s"
            ) from None
        except httpx.HTTPError as exc:
            raise ClassificationUnavailableError(f"Classifier unreachable: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise ClassificationUnavailableError(
                f"Classifier returned HTTP {resp.status_code}: {resp.text[:200]}"
            )

        try:
            payload = resp.json()
        except ValueError:
            raise ClassificationUnavailableError("Classifier returned a non-JSON response") from None

        verdict = self.parse_verdict(payload)
        logger.info("Classifier prediction for %s: %s", url, verdict.prediction)
        return verdict

    def parse_verdict(self, payload: Any) -> ClassificationVerdict:
        """Validate the oracle payload into a verdict."""
        if not isinstance(payload, dict):
            raise ClassificationUnavailableError(
                f"Classifier payload must be an object, got {type(payload).__name__}"
            )
        prediction = payload.get("prediction")
        if not isinstance(prediction, str) or not prediction.strip():
            raise ClassificationUnavailableError("Classifier payload is missing 'prediction'")

        prediction = prediction.strip()
        metadata = {k: v for k, v in payload.items() if k not in ("prediction", "url")}
        return ClassificationVerdict(
            prediction=prediction,
            is_benign=prediction.lower() in self.benign_labels,
            metadata=metadata,
        )
