"""Event tracking and analytics queries.

Tracked events are queued locally and posted in batches. The queue is flushed
when it reaches `ANALYTICS_BATCH_SIZE` events, or on the next `track` once
`ANALYTICS_FLUSH_INTERVAL` seconds have passed since the last flush. `close()`
flushes whatever is left.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..constants import API_ENDPOINTS
from ..exceptions import InvalidValueError
from ..schema import AnalyticsEvent
from ..utils import chunk_iter, drop_none, generate_session_id
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["ANALYTICS"]

EventInput = Union[str, AnalyticsEvent, Mapping[str, Any]]


class AnalyticsClient(ServiceClient):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.session_id = generate_session_id()
        self._queue: List[AnalyticsEvent] = []
        self._lock = threading.Lock()
        self._last_flush = time.monotonic()

    @property
    def pending(self) -> int:
        """Number of queued, unsent events."""
        return len(self._queue)

    def _build_event(self, event: EventInput, properties: Optional[Mapping[str, Any]], user_id: Optional[str]) -> AnalyticsEvent:
        if isinstance(event, AnalyticsEvent):
            return event
        if isinstance(event, Mapping):
            data = dict(event)
        elif isinstance(event, str):
            data = {"event": event, "properties": dict(properties or {}), "userId": user_id}
        else:
            raise InvalidValueError("Event must be a name, a mapping or an AnalyticsEvent", type=type(event).__name__)
        data.setdefault("sessionId", self.session_id)
        return AnalyticsEvent.model_validate(drop_none(data))

    def _due(self) -> bool:
        if len(self._queue) >= max(1, self.settings.ANALYTICS_BATCH_SIZE):
            return True
        interval = self.settings.ANALYTICS_FLUSH_INTERVAL
        return bool(interval) and time.monotonic() - self._last_flush >= interval

    def track(
        self,
        event: EventInput,
        properties: Optional[Mapping[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Queue one event; `timestamp` and `sessionId` are filled in when missing."""
        item = self._build_event(event, properties, user_id)
        self.logger.debug("Tracking event %s", item.event)
        with self._lock:
            self._queue.append(item)
            due = self._due()
        if due:
            self.flush()

    def track_batch(self, events: Iterable[EventInput]) -> None:
        for event in events:
            self.track(event)

    def flush(self) -> int:
        """Post every queued event and return how many were sent.

        Events go out in chunks of `ANALYTICS_BATCH_SIZE`. When a chunk fails the
        unsent events are put back at the head of the queue and the error is
        re-raised.
        """
        with self._lock:
            events, self._queue = self._queue, []
            self._last_flush = time.monotonic()
        if not events:
            return 0
        sent = 0
        for chunk in chunk_iter(events, max(1, self.settings.ANALYTICS_BATCH_SIZE)):
            try:
                self._http.post(_ENDPOINTS["TRACK"], json={"events": [e.to_payload() for e in chunk]})
            except Exception:
                with self._lock:
                    self._queue = events[sent:] + self._queue
                self.logger.error("Failed to flush %d analytics events", len(events) - sent)
                raise
            sent += len(chunk)
        self.logger.info("Flushed %d analytics events", sent)
        return sent

    def close(self) -> None:
        self.flush()

    # -------------------
    # Queries
    # -------------------
    def query(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        self.logger.debug("Executing analytics query")
        return self._unwrap(self._http.post(_ENDPOINTS["QUERY"], json=dict(query)), "query")

    def time_series(
        self,
        metric: str,
        time_range: Mapping[str, str],
        interval: str = "day",
        group_by: Optional[Sequence[str]] = None,
        filters: Optional[Mapping[str, Any]] = None,
        aggregation: str = "count",
    ) -> Dict[str, Any]:
        """Return `{"data": [{timestamp, value, dimensions}], "metadata": ...}`."""
        payload = drop_none(
            {
                "metric": metric,
                "timeRange": dict(time_range),
                "interval": interval,
                "groupBy": list(group_by) if group_by else None,
                "filters": dict(filters) if filters else None,
                "aggregation": aggregation,
            }
        )
        result = self.query(payload) or {}
        points = [
            {"timestamp": item.get("timestamp"), "value": item.get("value"), "dimensions": item.get("dimensions")}
            for item in result.get("data") or []
        ]
        return {"data": points, "metadata": result.get("metadata")}

    def funnel(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["FUNNEL"], json=dict(query)), "funnel")

    def cohort(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["COHORT"], json=dict(query)), "cohort")

    def metric(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["METRIC"], json=dict(query)), "metric")

    def realtime(self, metric: str) -> Any:
        return self._unwrap(self._http.get(f"{_ENDPOINTS['REALTIME']}/{metric}"), "realtime")

    def user_analytics(
        self,
        user_id: str,
        metrics: Optional[Sequence[str]] = None,
        time_range: Optional[Mapping[str, str]] = None,
    ) -> Any:
        params: Dict[str, Any] = {}
        if metrics:
            params["metrics"] = ",".join(metrics)
        if time_range:
            params["start"] = time_range.get("start")
            params["end"] = time_range.get("end")
        return self._unwrap(self._http.get(f"{_ENDPOINTS['USER']}/{user_id}", params=params), "user_analytics")

    def session_analytics(self, session_id: str) -> Any:
        return self._unwrap(self._http.get(f"{_ENDPOINTS['SESSION']}/{session_id}"), "session_analytics")

    def page_analytics(
        self,
        page: str,
        time_range: Optional[Mapping[str, str]] = None,
        metrics: Optional[Sequence[str]] = None,
    ) -> Any:
        payload = drop_none(
            {
                "page": page,
                "timeRange": dict(time_range) if time_range else None,
                "metrics": list(metrics) if metrics else None,
            }
        )
        return self._unwrap(self._http.post(_ENDPOINTS["PAGE"], json=payload), "page_analytics")

    def conversion_rate(
        self,
        start_event: str,
        end_event: str,
        time_range: Optional[Mapping[str, str]] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> float:
        payload = drop_none(
            {
                "startEvent": start_event,
                "endEvent": end_event,
                "timeRange": dict(time_range) if time_range else None,
                "filters": dict(filters) if filters else None,
            }
        )
        result = self._unwrap(self._http.post(_ENDPOINTS["CONVERSION"], json=payload), "conversion_rate") or {}
        return float(result.get("rate") or 0.0)

    def retention(
        self,
        cohort_event: str,
        return_event: str,
        time_range: Mapping[str, str],
        interval: str = "week",
    ) -> Any:
        if interval not in ("day", "week", "month"):
            raise InvalidValueError("Retention interval must be day, week or month", interval=interval)
        payload = {
            "cohortEvent": cohort_event,
            "returnEvent": return_event,
            "timeRange": dict(time_range),
            "interval": interval,
        }
        return self._unwrap(self._http.post(_ENDPOINTS["RETENTION"], json=payload), "retention")

    def export(self, query: Mapping[str, Any], format: str = "json") -> Any:
        """Export analytics data; CSV exports come back as text."""
        if format not in ("json", "csv"):
            raise InvalidValueError("Export format must be json or csv", format=format)
        return self._unwrap(self._http.post(_ENDPOINTS["EXPORT"], json={**query, "format": format}), "export")
