import asyncio
import itertools
import logging
import threading
import concurrent.futures
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from match_analytics.application.dtos.dtos import (
    BaselinePredictionDTO,
    CalculatePredictionsPayload,
    MessageType,
    WorkerRequest,
    WorkerResponse,
)
from match_analytics.domain.services.prediction_service import PredictionService
from match_analytics.domain.exceptions import PredictionException, WorkerUnavailableException

logger = logging.getLogger(__name__)

ResponseListener = Callable[[WorkerResponse], None]


def handle_message(
    message: Union[WorkerRequest, dict],
    prediction_service: PredictionService,
    request_id: Optional[int] = None,
) -> WorkerResponse:
    """
    Process a single inbound message.

    Never raises: malformed input, unknown message types and computation
    faults all come back as an ERROR response.
    """
    try:
        request = message if isinstance(message, WorkerRequest) else WorkerRequest.model_validate(message)
    except ValidationError as e:
        return WorkerResponse.error(f"Malformed message: {e.errors()[0]['msg']}", request_id)

    try:
        if request.type == MessageType.CALCULATE_PREDICTIONS.value:
            payload = CalculatePredictionsPayload.model_validate(request.payload)
            prediction = prediction_service.compute_baseline(
                home_team=payload.home_team,
                away_team=payload.away_team,
                matches=[m.to_entity() for m in payload.matches],
                home_matches=[m.to_entity() for m in payload.home_matches],
                away_matches=[m.to_entity() for m in payload.away_matches],
            )
            return WorkerResponse(
                type=MessageType.PREDICTION_RESULT,
                payload=BaselinePredictionDTO(**prediction.to_dict()).model_dump(),
                request_id=request_id,
            )

        return WorkerResponse.error(f"Unknown message type: {request.type}", request_id)

    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        return WorkerResponse.error(f"Invalid payload at '{location}': {first['msg']}", request_id)
    except PredictionException as e:
        return WorkerResponse.error(str(e), request_id)
    except Exception as e:
        logger.error(f"Error processing request {request_id} in worker: {e}", exc_info=True)
        return WorkerResponse.error(str(e) or "Unknown error", request_id)


def _fail_waiter(future: asyncio.Future, error: Exception) -> None:
    if not future.done():
        future.set_exception(error)


class BackgroundProcessor:
    """
    Runs baseline predictions off the request path.

    A single worker thread handles messages in arrival order. Callers post
    fire-and-forget messages and receive responses through listeners, or
    await `submit()` which correlates the response by request id.
    Tearing the processor down with `terminate()` is the only cancellation.
    """

    def __init__(
        self,
        prediction_service: Optional[PredictionService] = None,
        max_pending: int = 32,
    ):
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self.prediction_service = prediction_service or PredictionService()
        self.max_pending = max_pending
        self.executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="prediction-worker",
        )
        self._listeners: list[ResponseListener] = []
        # Futures awaited by submit() callers, with the loop that owns each
        self._waiters: dict[asyncio.Future, asyncio.AbstractEventLoop] = {}
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._pending = 0
        self._terminated = False
        logger.info(f"BackgroundProcessor initialized (max_pending={max_pending})")

    @property
    def is_running(self) -> bool:
        return not self._terminated

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    def add_listener(self, listener: ResponseListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ResponseListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def post_message(self, message: Union[WorkerRequest, dict]) -> int:
        """
        Queue a message for the worker and return its request id.

        Raises:
            WorkerUnavailableException: If the processor was terminated or
                already holds `max_pending` outstanding requests
        """
        with self._lock:
            if self._terminated:
                raise WorkerUnavailableException("Background processor has been terminated")
            if self._pending >= self.max_pending:
                raise WorkerUnavailableException(
                    f"Background processor is saturated ({self._pending} pending requests)"
                )
            request_id = next(self._sequence)
            self._pending += 1

        try:
            self.executor.submit(self._run, message, request_id)
        except RuntimeError as e:
            # Executor shut down between the check above and the submit
            with self._lock:
                self._pending -= 1
            raise WorkerUnavailableException(str(e)) from e

        return request_id

    def _run(self, message: Any, request_id: int) -> None:
        try:
            response = handle_message(message, self.prediction_service, request_id)
        finally:
            with self._lock:
                self._pending -= 1

        with self._lock:
            if self._terminated:
                return
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(response)
            except Exception as e:
                logger.error(f"Response listener failed for request {request_id}: {e}", exc_info=True)

    async def submit(
        self,
        message: Union[WorkerRequest, dict],
        timeout: Optional[float] = None,
    ) -> WorkerResponse:
        """
        Post a message and wait for the response to that same request.

        Responses to other requests are ignored. The listener is removed
        whether the wait completes, times out or is cancelled.

        Raises:
            WorkerUnavailableException: If the message cannot be queued, or the
                processor is terminated before the response arrives
            asyncio.TimeoutError: If no response arrives within `timeout`
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        # The request id is only known after posting; responses can race ahead of it
        state: dict[str, Any] = {"request_id": None, "early": {}}

        def resolve(response: WorkerResponse) -> None:
            if not future.done():
                future.set_result(response)

        def on_response(response: WorkerResponse) -> None:
            with self._lock:
                expected = state["request_id"]
                if expected is None:
                    state["early"][response.request_id] = response
                    return
            if response.request_id == expected:
                loop.call_soon_threadsafe(resolve, response)

        with self._lock:
            self._waiters[future] = loop
        self.add_listener(on_response)
        try:
            request_id = self.post_message(message)
            with self._lock:
                state["request_id"] = request_id
                early = state["early"].pop(request_id, None)
            if early is not None:
                resolve(early)
            return await asyncio.wait_for(future, timeout=timeout)
        finally:
            self.remove_listener(on_response)
            with self._lock:
                self._waiters.pop(future, None)

    def terminate(self) -> None:
        """Cancel queued work, fail pending submit() waiters and release the worker thread."""
        with self._lock:
            if self._terminated:
                return
            self._terminated = True
            self._listeners.clear()
            waiters = list(self._waiters.items())
            self._waiters.clear()
        self.executor.shutdown(wait=False, cancel_futures=True)

        for future, loop in waiters:
            if loop.is_closed():
                continue
            loop.call_soon_threadsafe(
                _fail_waiter,
                future,
                WorkerUnavailableException("Background processor terminated before responding"),
            )
        logger.info("BackgroundProcessor terminated")
