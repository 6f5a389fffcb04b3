"""Workflow definitions and executions."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from ..constants import API_ENDPOINTS
from ..exceptions import WorkflowError
from ..utils import drop_none
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["WORKFLOW"]

# Milliseconds
DEFAULT_TIMEOUT = 300_000


class WorkflowClient(ServiceClient):
    error_class = WorkflowError

    def _path(self, workflow_id: str, suffix: str = "") -> str:
        return f"{_ENDPOINTS['BASE']}/{workflow_id}{suffix}"

    def create(self, definition: Mapping[str, Any]) -> Dict[str, Any]:
        """Create a workflow; returns `{"id": ..., "status": ...}`."""
        self.logger.debug("Creating workflow %s", definition.get("name"))
        return self._unwrap(self._http.post(_ENDPOINTS["CREATE"], json=dict(definition)), "create")

    def execute(
        self,
        workflow_id: str,
        input: Optional[Mapping[str, Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
        timeout: int = DEFAULT_TIMEOUT,
        run_async: bool = False,
    ) -> Dict[str, Any]:
        payload = {
            "workflowId": workflow_id,
            "input": dict(input or {}),
            "context": dict(context or {}),
            "timeout": timeout,
            "async": run_async,
        }
        return self._unwrap(self._http.post(self._path(workflow_id, "/execute"), json=payload), "execute")

    def list(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
        sort_by: str = "updatedAt",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        """Return `{"workflows": [...], "total": n, "hasMore": bool}`."""
        params = drop_none(
            {
                "status": status,
                "category": category,
                "search": search,
                "limit": limit,
                "offset": offset,
                "sortBy": sort_by,
                "sortOrder": sort_order,
            }
        )
        return self._unwrap(self._http.get(_ENDPOINTS["LIST"], params=params), "list")

    def get(self, workflow_id: str) -> Dict[str, Any]:
        return self._unwrap(self._http.get(self._path(workflow_id)), "get")

    def update(self, workflow_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.put(self._path(workflow_id), json=dict(updates)), "update")

    def delete(self, workflow_id: str) -> None:
        self._unwrap(self._http.delete(self._path(workflow_id)), "delete")

    def get_executions(
        self,
        workflow_id: str,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = drop_none(
            {"limit": limit, "offset": offset, "status": status, "startDate": start_date, "endDate": end_date}
        )
        return self._unwrap(self._http.get(self._path(workflow_id, "/executions"), params=params), "get_executions")

    def validate(self, definition: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["VALIDATE"], json=dict(definition)), "validate")

    def generate_from_prompt(
        self,
        prompt: str,
        category: Optional[str] = None,
        complexity: str = "medium",
        include_error_handling: bool = True,
        include_notifications: bool = False,
        connector_preferences: Optional[Sequence[str]] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> Dict[str, Any]:
        """Ask the backend to draft a workflow definition from a natural-language prompt."""
        payload = drop_none(
            {
                "prompt": prompt,
                "category": category,
                "complexity": complexity,
                "includeErrorHandling": include_error_handling,
                "includeNotifications": include_notifications,
                "connectorPreferences": list(connector_preferences or []),
                "timeout": timeout,
            }
        )
        return self._unwrap(self._http.post(_ENDPOINTS["GENERATE"], json=payload), "generate_from_prompt")
