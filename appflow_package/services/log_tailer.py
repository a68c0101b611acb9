from __future__ import annotations

import logging
import time
from typing import Callable

from appflow_package.core.errors import LogRewrittenError
from appflow_package.models.job import PackageBuild
from appflow_package.services.presenter import BuildSink

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 5.0


def advance_cursor(trace: str, cursor: int) -> tuple[str, int]:
    """
    Split an append-only log into (new text, new cursor).

    The server only ever appends to the trace, so everything past `cursor` is
    unseen output. A trace shorter than the cursor means the log was replaced;
    that raises ValueError rather than silently dropping output.
    """
    if len(trace) < cursor:
        raise ValueError(f"trace length {len(trace)} < cursor {cursor}")
    if len(trace) == cursor:
        return "", cursor
    return trace[cursor:], len(trace)


def tail_build_log(
    fetch: Callable[[], PackageBuild],
    sink: BuildSink,
    *,
    interval_s: float = DEFAULT_POLL_INTERVAL_S,
    sleep: Callable[[float], None] = time.sleep,
) -> PackageBuild:
    """
    Poll `fetch` until the build reaches success/failed, streaming new log text
    to `sink` as it shows up. Returns the last fetched build.

    A fetch error ends tailing immediately; nothing is retried. There is no
    stall timeout: a build that never finishes is polled forever.
    """
    cursor = 0
    seen_queued_notice = False
    last_state: str | None = None

    try:
        while True:
            sleep(interval_s)
            build = fetch()

            if build.state != last_state:
                logger.debug("build %s state: %s -> %s", build.job_id, last_state, build.state)
                last_state = build.state

            if build.is_queued and not seen_queued_notice:
                sink.queued_notice()
                seen_queued_notice = True

            trace = build.trace
            try:
                chunk, cursor = advance_cursor(trace, cursor)
            except ValueError as e:
                raise LogRewrittenError(build.job_id, cursor, len(trace)) from e
            if chunk:
                sink.log_chunk(chunk)

            if build.is_terminal:
                return build
    finally:
        sink.log_end()
