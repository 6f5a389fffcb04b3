"""Message queues.

Message bodies that are not strings are sent JSON-encoded; received bodies that
hold valid JSON are decoded back.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..constants import API_ENDPOINTS
from ..exceptions import QueueError
from ..utils import drop_none
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["QUEUE"]


def _encode_body(body: Any) -> str:
    return body if isinstance(body, str) else json.dumps(body)


def _decode_body(body: Any) -> Any:
    if not isinstance(body, str):
        return body
    try:
        return json.loads(body)
    except ValueError:
        return body


class QueueClient(ServiceClient):
    error_class = QueueError

    def send(self, queue_url: str, message: Any, **options: Any) -> Dict[str, Any]:
        """Send one message; extra options (`delaySeconds`, `messageGroupId`, ...) pass through."""
        payload = {"queueUrl": queue_url, "messageBody": _encode_body(message), **options}
        return self._unwrap(self._http.post(_ENDPOINTS["SEND"], json=payload), "send")

    def send_batch(self, queue_url: str, messages: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        """Send several messages, each `{"body": ..., "id": ...}` plus optional attributes.

        Returns `{"successful": [...], "failed": [...]}`.
        """
        entries = []
        for index, message in enumerate(messages):
            entry = drop_none(
                {
                    "id": message.get("id") or f"msg-{index}",
                    "messageBody": _encode_body(message.get("body")),
                    "delaySeconds": message.get("delaySeconds"),
                    "messageAttributes": message.get("messageAttributes"),
                    "messageGroupId": message.get("messageGroupId"),
                    "messageDeduplicationId": message.get("messageDeduplicationId"),
                }
            )
            entries.append(entry)
        payload = {"queueUrl": queue_url, "entries": entries}
        return self._unwrap(self._http.post(_ENDPOINTS["SEND_BATCH"], json=payload), "send_batch")

    def receive(
        self,
        queue_url: str,
        max_messages: int = 1,
        wait_time_seconds: int = 0,
        visibility_timeout_seconds: Optional[int] = None,
        message_attribute_names: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        payload = drop_none(
            {
                "queueUrl": queue_url,
                "maxMessages": max_messages,
                "waitTimeSeconds": wait_time_seconds,
                "visibilityTimeoutSeconds": visibility_timeout_seconds,
                "messageAttributeNames": message_attribute_names or ["All"],
            }
        )
        messages = self._unwrap(self._http.post(_ENDPOINTS["RECEIVE"], json=payload), "receive") or []
        return [{**m, "body": _decode_body(m.get("body"))} for m in messages]

    def delete(self, queue_url: str, receipt_handle: str) -> None:
        payload = {"queueUrl": queue_url, "receiptHandle": receipt_handle}
        self._unwrap(self._http.post(_ENDPOINTS["DELETE"], json=payload), "delete")

    def create_queue(
        self,
        queue_name: str,
        attributes: Optional[Mapping[str, Any]] = None,
        tags: Optional[Mapping[str, str]] = None,
        dead_letter_queue: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Create a queue and return its URL.

        Attribute values are sent as strings (`{"VisibilityTimeout": "30"}`).
        """
        payload = drop_none(
            {
                "queueName": queue_name,
                "attributes": {k: str(v) for k, v in (attributes or {}).items() if v is not None},
                "tags": dict(tags) if tags else None,
                "deadLetterQueue": dict(dead_letter_queue) if dead_letter_queue else None,
            }
        )
        data = self._unwrap(self._http.post(_ENDPOINTS["CREATE"], json=payload), "create_queue") or {}
        if not data.get("queueUrl"):
            raise QueueError("Response did not contain a queue URL", queue_name=queue_name)
        return data["queueUrl"]

    def delete_queue(self, queue_url: str) -> None:
        self._unwrap(self._http.delete(_ENDPOINTS["DELETE_QUEUE"], json={"queueUrl": queue_url}), "delete_queue")

    def list_queues(self, prefix: Optional[str] = None) -> List[str]:
        data = self._unwrap(self._http.get(_ENDPOINTS["LIST"], params={"prefix": prefix}), "list_queues") or {}
        if isinstance(data, list):
            return data
        return list(data.get("queueUrls") or [])

    def purge_queue(self, queue_url: str) -> None:
        self._unwrap(self._http.post(_ENDPOINTS["PURGE"], json={"queueUrl": queue_url}), "purge_queue")

    def get_queue_stats(self, queue_url: str) -> Dict[str, Any]:
        return self._unwrap(self._http.get(_ENDPOINTS["STATS"], params={"queueUrl": queue_url}), "get_queue_stats")
