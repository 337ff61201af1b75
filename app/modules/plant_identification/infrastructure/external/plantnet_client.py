# 📄 File: app/modules/plant_identification/infrastructure/external/plantnet_client.py
# 🧭 Purpose (Layman Explanation):
# Sends the plant photo to the PlantNet recognition service and brings back its list of likely species,
# trying again a couple of times if the service hiccups.
# 🧪 Purpose (Technical Summary):
# Async PlantNet-compatible classifier client: multipart upload over aiohttp, bounded retries with
# exponential backoff via tenacity (5xx / transport / timeout / malformed body retryable, 4xx not),
# cancellation through an optional asyncio.Event, and response validation into RawSuggestion models.
# 🔗 Dependencies:
# - aiohttp: HTTP client
# - tenacity: Retry loop and backoff
# - pydantic: Boundary validation
# 🔄 Connected Modules / Calls From:
# Called by: IdentificationService
# Connects to: PlantNet identify endpoint (PLANTNET_API_URL)

import asyncio
import json
import logging
import time
from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.shared.config.settings import Settings
from app.shared.core.exceptions import (
    ClassificationUnavailableError,
    ClassifierAttemptError,
    ClientRequestError,
    IdentificationCancelledError,
)
from app.shared.utils.logging import get_logger

from ...domain.models.identification import RawSuggestion

logger = get_logger(__name__)

SPECIES_NOT_FOUND = "species not found"


def parse_suggestions(payload: Any) -> List[RawSuggestion]:
    """
    Map a classifier JSON body to validated suggestions.

    Accepts the PlantNet shape (results[].species.scientificNameWithoutAuthor,
    commonNames, score) and the generic shape (suggestions[].scientific_name,
    common_name, score). Invalid entries are dropped; a body with neither list
    yields an empty list.
    """
    if not isinstance(payload, dict):
        raise ValueError("Classifier response is not a JSON object")

    suggestions: List[RawSuggestion] = []

    if isinstance(payload.get("results"), list):
        for item in payload["results"]:
            try:
                species = item.get("species") or {}
                common_names = species.get("commonNames") or []
                suggestions.append(RawSuggestion(
                    scientific_name=species.get("scientificNameWithoutAuthor")
                    or species.get("scientificName"),
                    common_name=common_names[0] if common_names else None,
                    confidence=item.get("score"),
                ))
            except (AttributeError, TypeError, PydanticValidationError) as e:
                logger.warning("Dropping invalid classifier result", entry=str(item)[:200], reason=str(e))

    elif isinstance(payload.get("suggestions"), list):
        for item in payload["suggestions"]:
            try:
                suggestions.append(RawSuggestion(
                    scientific_name=item.get("scientific_name"),
                    common_name=item.get("common_name"),
                    confidence=item.get("score", item.get("confidence")),
                ))
            except (AttributeError, TypeError, PydanticValidationError) as e:
                logger.warning("Dropping invalid classifier suggestion", entry=str(item)[:200], reason=str(e))

    return suggestions


def _is_species_not_found(body: str) -> bool:
    """PlantNet answers 404 with {"message": "Species not found"} when nothing matches."""
    try:
        payload = json.loads(body)
    except ValueError:
        return False
    message = payload.get("message") if isinstance(payload, dict) else None
    return isinstance(message, str) and SPECIES_NOT_FOUND in message.lower()


class PlantNetClient:
    """
    Species classifier client.

    Features:
    - Bounded attempts, each with its own timeout
    - Exponential backoff: base_delay * 2 ** (attempt - 1)
    - Cancellation of in-flight attempts and backoff sleeps
    - Cumulative call statistics
    """

    api_name = "plantnet"

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        attempt_timeout: float = 15.0,
        default_organ: str = "leaf",
        session: Optional[ClientSession] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.attempt_timeout = attempt_timeout
        self.default_organ = default_organ
        self.session = session
        self._owns_session = session is None

        self.stats = {
            "calls": 0,
            "attempts": 0,
            "retries": 0,
            "failures": 0,
            "successful_calls": 0,
            "total_duration_ms": 0.0,
        }

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[ClientSession] = None) -> "PlantNetClient":
        return cls(
            api_url=settings.PLANTNET_API_URL,
            api_key=settings.PLANTNET_API_KEY,
            max_attempts=settings.CLASSIFIER_MAX_ATTEMPTS,
            base_delay=settings.CLASSIFIER_BASE_DELAY,
            attempt_timeout=settings.CLASSIFIER_ATTEMPT_TIMEOUT,
            default_organ=settings.CLASSIFIER_DEFAULT_ORGAN,
            session=session,
        )

    async def initialize(self) -> None:
        """Initialize HTTP session."""
        if self.session is None:
            self.session = ClientSession(
                headers={"User-Agent": "PlantScanner/1.0", "Accept": "application/json"},
            )
            self._owns_session = True
            logger.info(f"{self.api_name} client initialized")

    async def close(self) -> None:
        """Close HTTP session."""
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None
            logger.info(f"{self.api_name} client closed")

    async def classify(
        self,
        image_bytes: bytes,
        organ: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[RawSuggestion]:
        """
        Submit an image and return the classifier's suggestions in its own order.

        Raises:
            ClientRequestError: Classifier refused the request (4xx), after one attempt
            ClassificationUnavailableError: Every attempt failed
            IdentificationCancelledError: cancel_event was set
        """
        if self.session is None:
            await self.initialize()

        organ = organ or self.default_organ
        self.stats["calls"] += 1
        started = time.monotonic()
        attempts = 0

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, exp_base=2, min=0),
            retry=retry_if_exception_type(ClassifierAttemptError),
            before_sleep=before_sleep_log(logger.logger, logging.WARNING),
            sleep=self._backoff_sleep(cancel_event),
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    if attempts > 1:
                        self.stats["retries"] += 1
                    self._raise_if_cancelled(cancel_event, "classifying")
                    suggestions = await self._cancellable(
                        self._attempt(image_bytes, organ), cancel_event
                    )

        except RetryError as e:
            last_error = e.last_attempt.exception()
            self.stats["failures"] += 1
            self._record_duration(started)
            logger.error(
                "Classifier unavailable after retries",
                api_name=self.api_name,
                attempts=attempts,
                last_error=str(last_error),
            )
            raise ClassificationUnavailableError(
                attempts=attempts, last_error=last_error
            ) from last_error

        except ClientRequestError:
            self.stats["failures"] += 1
            self._record_duration(started)
            raise

        duration_ms = self._record_duration(started)
        self.stats["successful_calls"] += 1
        logger.info(
            "Classification completed",
            api_name=self.api_name,
            attempts=attempts,
            duration_ms=round(duration_ms, 2),
            suggestion_count=len(suggestions),
        )
        return suggestions

    async def _attempt(self, image_bytes: bytes, organ: str) -> List[RawSuggestion]:
        """One HTTP round-trip. Raises ClassifierAttemptError for retryable failures."""
        self.stats["attempts"] += 1

        form = aiohttp.FormData()
        form.add_field("images", image_bytes, filename="image.jpg", content_type="image/jpeg")
        form.add_field("organs", organ)

        params = {"api-key": self.api_key} if self.api_key else None
        started = time.monotonic()
        status_code = None

        try:
            async with self.session.post(
                self.api_url,
                data=form,
                params=params,
                timeout=ClientTimeout(total=self.attempt_timeout),
            ) as response:
                status_code = response.status
                body = await response.text()

        except asyncio.TimeoutError as e:
            self._log_attempt(status_code, started, success=False)
            raise ClassifierAttemptError(
                f"Classifier attempt timed out after {self.attempt_timeout}s",
                api_name=self.api_name,
            ) from e
        except aiohttp.ClientError as e:
            self._log_attempt(status_code, started, success=False)
            raise ClassifierAttemptError(
                f"Classifier transport error: {e}", api_name=self.api_name
            ) from e

        self._log_attempt(status_code, started, success=200 <= status_code < 300)
        return self._handle_response(status_code, body)

    def _handle_response(self, status_code: int, body: str) -> List[RawSuggestion]:
        """Map status and body to suggestions or the right error."""
        if status_code == 404 and _is_species_not_found(body):
            logger.info("Classifier found no matching species", api_name=self.api_name)
            return []

        if 400 <= status_code < 500:
            raise ClientRequestError(
                f"Classifier rejected the request with HTTP {status_code}",
                api_name=self.api_name,
                api_status_code=status_code,
                api_response=body[:500],
            )

        if status_code >= 500 or status_code < 200:
            raise ClassifierAttemptError(
                f"Classifier returned HTTP {status_code}",
                api_name=self.api_name,
                api_status_code=status_code,
                api_response=body[:500],
            )

        try:
            return parse_suggestions(json.loads(body))
        except ValueError as e:
            raise ClassifierAttemptError(
                f"Malformed classifier response: {e}",
                api_name=self.api_name,
                api_status_code=status_code,
                api_response=body[:500],
            ) from e

    def _backoff_sleep(self, cancel_event: Optional[asyncio.Event]):
        async def sleep(seconds: float) -> None:
            if cancel_event is None:
                await asyncio.sleep(seconds)
                return
            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
            except asyncio.TimeoutError:
                return
            raise IdentificationCancelledError(stage="classifier_backoff")

        return sleep

    async def _cancellable(self, coro, cancel_event: Optional[asyncio.Event]):
        """Await coro, aborting it as soon as cancel_event is set."""
        if cancel_event is None:
            return await coro

        request = asyncio.ensure_future(coro)
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            waiter.cancel()

        if not request.done():
            request.cancel()
            try:
                await request
            except asyncio.CancelledError:
                pass
            raise IdentificationCancelledError(stage="classifying")

        return request.result()

    @staticmethod
    def _raise_if_cancelled(cancel_event: Optional[asyncio.Event], stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise IdentificationCancelledError(stage=stage)

    def _log_attempt(self, status_code: Optional[int], started: float, success: bool) -> None:
        logger.performance.log_external_api_call(
            api_name=self.api_name,
            endpoint=self.api_url,
            method="POST",
            status_code=status_code,
            duration_ms=(time.monotonic() - started) * 1000,
            success=success,
        )

    def _record_duration(self, started: float) -> float:
        duration_ms = (time.monotonic() - started) * 1000
        self.stats["total_duration_ms"] += duration_ms
        return duration_ms

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        calls = self.stats["calls"]
        return {
            **self.stats,
            "average_duration_ms": round(self.stats["total_duration_ms"] / calls, 2) if calls else 0.0,
            "failure_rate": round(self.stats["failures"] / calls, 4) if calls else 0.0,
        }
