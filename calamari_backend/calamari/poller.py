"""Completion tracking for asynchronous Calamari requests.

Mutating Calamari endpoints answer ``202 Accepted`` with a ``request_id``.
The request is done once ``GET request/{request-fsid}`` reports
``state == "complete"``; its ``error`` flag then says whether it worked.
"""

import asyncio
import logging
from typing import Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from calamari_backend.calamari.errors import DecodeError, JobFailed, JobTimeout
from calamari_backend.calamari.executor import RequestExecutor, RouteResponse
from calamari_backend.models.cluster import AsyncJobHandle, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: Type[ModelT], response: RouteResponse) -> ModelT:
    data = response.json()
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DecodeError(
            message=f"Error parsing response data: {e}",
            details={"route": response.route, "body": response.text},
        ) from e


class JobPoller:
    """Polls a Calamari request until it completes."""

    def __init__(
        self,
        executor: RequestExecutor,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Union[float, None] = None,
    ) -> None:
        """Initialize JobPoller.

        Args:
            executor: Executor used for the status queries
            interval: Seconds to wait before each status query
            timeout: Default deadline in seconds, None to wait indefinitely
        """
        self.executor = executor
        self.interval = interval
        self.timeout = timeout

    async def wait(
        self,
        mon: str,
        response: RouteResponse,
        timeout: Union[float, None] = None,
    ) -> bool:
        """Wait for the request behind an accepted response to complete.

        Cancelling the calling task stops the poll immediately, including any
        status query in flight.

        Args:
            mon: Monitor host to poll
            response: The 202 response holding the request handle
            timeout: Deadline in seconds, overriding the poller default

        Returns:
            True once the request completed without error

        Raises:
            DecodeError: If the handle or a status cannot be parsed
            JobFailed: If the request completed with an error
            JobTimeout: If the deadline passed first
            TransportError: On the first network failure while polling
            RemoteError: If a status query returns an unexpected status
        """
        handle = _parse(AsyncJobHandle, response)
        deadline = timeout if timeout is not None else self.timeout

        logger.info(f"Waiting for Calamari request {handle.request_id}")
        if deadline is None:
            return await self._poll(mon, handle.request_id)

        try:
            return await asyncio.wait_for(self._poll(mon, handle.request_id), timeout=deadline)
        except asyncio.TimeoutError as e:
            logger.error(f"Request {handle.request_id} timed out after {deadline}s")
            raise JobTimeout(handle.request_id, deadline) from e

    async def _poll(self, mon: str, request_id: str) -> bool:
        while True:
            await asyncio.sleep(self.interval)
            status = await self.status(mon, request_id)
            logger.debug(f"Request {request_id} state: {status.state}")
            if status.complete:
                if status.error:
                    raise JobFailed(status.error_message or "", details={"request_id": request_id})
                logger.info(f"Request {request_id} complete")
                return True

    async def status(self, mon: str, request_id: str) -> JobStatus:
        """Fetch the current status of a request."""
        response = await self.executor.execute(
            "GetRequestStatus",
            mon,
            {"request-fsid": request_id},
        )
        return _parse(JobStatus, response)
