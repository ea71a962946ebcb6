"""
In-process delivery queue for GTI postbacks.

One PostbackDispatcher exists per process (built in GtiConfig.ready()).
Jobs are delivered one at a time in FIFO order by a single drain worker;
failed deliveries are re-enqueued after a fixed backoff until the attempt
budget is spent.

The queue lives in memory only. Jobs queued or waiting on a retry timer
are lost on restart; the PostbackLog rows already written are the only
trace left for reconciliation.
"""
import logging
import threading
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Sequence

import httpx
from django.db import connections

from gti.services.audit import persist_attempt
from gti.services.postback_client import (
    PostbackConfigurationError,
    parse_response_body,
    send_postback,
)
from gti.services.tracker import record_delivery

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAYS = (5, 15, 60)  # seconds, indexed by the attempt that just failed


@dataclass(frozen=True)
class PostbackJob:
    """One delivery to perform; a retry is a copy with attempt + 1."""

    lead_id: int
    event_type: str
    call_uuid: str
    primary_phone: str
    payload: dict
    attempt: int = 1
    trigger: str = ''


def _run_in_thread(target: Callable[[], None]) -> None:
    def run():
        try:
            target()
        finally:
            connections.close_all()

    threading.Thread(target=run, name='gti-postback-drain', daemon=True).start()


def _start_timer(delay: float, callback: Callable[[], None]) -> None:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


class PostbackDispatcher:
    """
    FIFO postback queue with a single drain worker.

    Args:
        send: Callable performing the HTTP POST (call_uuid, payload) -> response
        max_attempts: Total attempts per job, first try included
        retry_delays: Backoff in seconds; the last entry repeats
        start_worker: Runs the drain loop (a daemon thread by default)
        schedule: Calls a callback after a delay (a daemon timer by default)
    """

    def __init__(
        self,
        send: Callable[[str, dict], httpx.Response] = send_postback,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delays: Sequence[float] = RETRY_DELAYS,
        start_worker: Callable[[Callable[[], None]], None] = _run_in_thread,
        schedule: Callable[[float, Callable[[], None]], None] = _start_timer,
    ):
        self._send = send
        self.max_attempts = max_attempts
        self.retry_delays = tuple(retry_delays)
        self._start_worker = start_worker
        self._schedule = schedule
        self._queue = deque()
        self._lock = threading.Lock()
        self._processing = False

    @property
    def pending(self) -> int:
        """Jobs queued and not yet picked up (retries waiting on a timer excluded)."""
        with self._lock:
            return len(self._queue)

    def enqueue(self, job: PostbackJob, delay: float = 0) -> None:
        """
        Queue a job, optionally after a delay.

        Starts the drain worker when it is idle; never starts a second one.
        """
        if delay > 0:
            logger.info(
                f"GTI {job.event_type} postback for lead {job.lead_id} "
                f"scheduled for attempt {job.attempt} in {delay}s"
            )
            self._schedule(delay, lambda: self.enqueue(job))
            return

        with self._lock:
            self._queue.append(job)
            if self._processing:
                return
            self._processing = True

        self._start_worker(self._drain)

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._queue:
                    self._processing = False
                    return
                job = self._queue.popleft()

            try:
                self.execute_job(job)
            except Exception as e:
                logger.error(
                    f"GTI postback queue error for lead {job.lead_id} "
                    f"(attempt {job.attempt}): {e}",
                    exc_info=True
                )

    def retry_delay(self, attempt: int) -> float:
        """Backoff after a failed attempt, clamped to the last table entry."""
        index = min(max(attempt, 1), len(self.retry_delays)) - 1
        return self.retry_delays[index]

    def _retry_or_drop(self, job: PostbackJob) -> None:
        if job.attempt < self.max_attempts:
            self.enqueue(replace(job, attempt=job.attempt + 1), delay=self.retry_delay(job.attempt))
            return

        logger.error(
            f"GTI {job.event_type} postback for lead {job.lead_id} PERMANENTLY_FAILED: "
            f"{self.max_attempts} attempts exhausted (call_uuid={job.call_uuid})"
        )

    def execute_job(self, job: PostbackJob) -> None:
        """
        Perform one delivery attempt and record it.

        Workflow:
        1. POST the payload to GTI
        2. Record the attempt (audit log + lead history)
        3. On success: register the delivery on the inbound call record
        4. On non-2xx, network or any other send error: retry with backoff if attempts remain
        5. On missing configuration: record the failure, do not retry
        """
        logger.info(
            f"GTI {job.event_type} postback for lead {job.lead_id}: "
            f"attempt #{job.attempt}"
        )

        try:
            response = self._send(job.call_uuid, job.payload)

        except PostbackConfigurationError as e:
            reason = str(e)
            logger.error(f"GTI postback for lead {job.lead_id} not sent: {reason}")
            persist_attempt(job, success=False, status=None, body={'message': reason},
                            error_message=reason)
            return

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            reason = str(e) or e.__class__.__name__
            persist_attempt(job, success=False, status=None, body={'message': reason},
                            error_message=reason)
            logger.warning(
                f"GTI postback for lead {job.lead_id} FAILED: network error, "
                f"attempt {job.attempt}/{self.max_attempts}"
            )
            self._retry_or_drop(job)
            return

        except Exception as e:
            reason = str(e) or e.__class__.__name__
            logger.error(f"GTI postback for lead {job.lead_id} FAILED: {reason}", exc_info=True)
            persist_attempt(job, success=False, status=None, body={'message': reason},
                            error_message=reason)
            self._retry_or_drop(job)
            return

        success = 200 <= response.status_code < 300
        persist_attempt(
            job,
            success=success,
            status=response.status_code,
            body=parse_response_body(response),
            error_message=None if success else f"Unexpected status code {response.status_code}",
        )

        if success:
            record_delivery(job.primary_phone, job.call_uuid)
            logger.info(f"GTI {job.event_type} postback for lead {job.lead_id} DELIVERED")
            return

        logger.warning(
            f"GTI postback for lead {job.lead_id} FAILED: status {response.status_code}, "
            f"attempt {job.attempt}/{self.max_attempts}"
        )
        self._retry_or_drop(job)

