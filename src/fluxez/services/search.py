"""Full-text and vector search.

Every typed search (`term`, `range`, `fuzzy`, ...) is a `search` call with a
`type` discriminator; extra keyword options (`size`, `index`, `filters`, ...)
are sent as-is.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..constants import API_ENDPOINTS
from ..schema import SearchResult
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["SEARCH"]

_PRE_TAGS = ["<mark>"]
_POST_TAGS = ["</mark>"]


def _highlight(fields: Sequence[str]) -> Dict[str, Any]:
    return {"fields": {f: {} for f in fields}, "preTags": _PRE_TAGS, "postTags": _POST_TAGS}


class SearchClient(ServiceClient):
    def search(self, query: Mapping[str, Any]) -> SearchResult:
        self.logger.debug("Executing search: %s", query.get("type", "match"))
        body = self._unwrap(self._http.post(_ENDPOINTS["SEARCH"], json=dict(query)), "search") or {}
        total = body.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)
        return SearchResult.model_validate({**body, "hits": body.get("hits") or [], "total": total or 0})

    def vector_search(
        self,
        collection: str,
        vector: Sequence[float],
        limit: int = 10,
        filter: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> SearchResult:
        payload: Dict[str, Any] = {"collection": collection, "vector": list(vector), "limit": limit, **options}
        if filter:
            payload["filter"] = dict(filter)
        body = self._unwrap(self._http.post(_ENDPOINTS["VECTOR"], json=payload), "vector_search") or {}
        return SearchResult.model_validate({**body, "hits": body.get("hits") or [], "total": body.get("total") or 0})

    def _typed(
        self,
        query: str,
        search_type: Optional[str],
        fields: Optional[Sequence[str]],
        highlight: Union[bool, Mapping[str, Any], None],
        options: Dict[str, Any],
    ) -> SearchResult:
        payload: Dict[str, Any] = {"query": query}
        if fields:
            payload["fields"] = list(fields)
        if search_type:
            payload["type"] = search_type
        payload.update(options)
        if highlight is True:
            payload["highlight"] = _highlight(fields or [])
        elif highlight:
            payload["highlight"] = dict(highlight)
        return self.search(payload)

    def query(
        self,
        q: str,
        fields: Optional[Sequence[str]] = None,
        highlight: Union[bool, Mapping[str, Any], None] = None,
        **options: Any,
    ) -> SearchResult:
        """Simple string query; `highlight=True` wraps matches in `<mark>` tags."""
        return self._typed(q, None, fields, highlight, options)

    def multi_match(
        self,
        query: str,
        fields: Sequence[str],
        highlight: Union[bool, Mapping[str, Any], None] = None,
        **options: Any,
    ) -> SearchResult:
        return self._typed(query, "multi_match", fields, highlight, options)

    def match_phrase(
        self,
        field: str,
        phrase: str,
        highlight: Union[bool, Mapping[str, Any], None] = None,
        **options: Any,
    ) -> SearchResult:
        return self._typed(phrase, "match_phrase", [field], highlight, options)

    def term(self, field: str, value: Any, **options: Any) -> SearchResult:
        return self._typed(str(value), "term", [field], None, options)

    def terms(self, field: str, values: Sequence[Any], **options: Any) -> SearchResult:
        return self._typed(" OR ".join(str(v) for v in values), "terms", [field], None, options)

    def range(self, field: str, gte: Any = None, gt: Any = None, lte: Any = None, lt: Any = None, **options: Any) -> SearchResult:
        bounds = {k: v for k, v in (("gte", gte), ("gt", gt), ("lte", lte), ("lt", lt)) if v is not None}
        return self._typed(json.dumps(bounds), "range", [field], None, options)

    def prefix(self, field: str, prefix: str, **options: Any) -> SearchResult:
        return self._typed(prefix, "prefix", [field], None, options)

    def wildcard(self, field: str, pattern: str, **options: Any) -> SearchResult:
        return self._typed(pattern, "wildcard", [field], None, options)

    def fuzzy(self, field: str, value: str, fuzziness: Union[int, str] = "AUTO", **options: Any) -> SearchResult:
        return self._typed(value, "fuzzy", [field], None, {"fuzziness": fuzziness, **options})

    def bool(
        self,
        must: Optional[List[Mapping[str, Any]]] = None,
        should: Optional[List[Mapping[str, Any]]] = None,
        must_not: Optional[List[Mapping[str, Any]]] = None,
        filter: Optional[List[Mapping[str, Any]]] = None,
        **options: Any,
    ) -> SearchResult:
        clauses = {
            k: [dict(c) for c in v]
            for k, v in (("must", must), ("should", should), ("mustNot", must_not), ("filter", filter))
            if v
        }
        return self._typed(json.dumps(clauses), "bool", None, None, options)

    def aggregate(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["AGGREGATE"], json=dict(query)), "aggregate")

    def suggest(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["SUGGEST"], json=dict(query)), "suggest")

    def autocomplete(self, field: str, prefix: str, size: int = 10, fuzzy: Optional[bool] = None) -> List[str]:
        payload: Dict[str, Any] = {"text": prefix, "field": field, "type": "completion", "size": size}
        if fuzzy is not None:
            payload["fuzzy"] = fuzzy
        result = self.suggest(payload) or {}
        return list(result.get("suggestions") or [])

    def more_like_this(self, document_id: str, **options: Any) -> SearchResult:
        return self._typed(document_id, "more_like_this", None, None, options)

    def count(self, query: Mapping[str, Any]) -> int:
        """Number of documents matching `query` (runs the search with `size: 0`)."""
        return self.search({**query, "size": 0}).total

    def delete_by_query(self, query: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["DELETE_BY_QUERY"], json=dict(query)), "delete_by_query")

    def reindex(self, source: str, destination: str, query: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"source": source, "destination": destination}
        if query:
            payload["query"] = dict(query)
        return self._unwrap(self._http.post(_ENDPOINTS["REINDEX"], json=payload), "reindex")

    def create_index(
        self,
        name: str,
        mappings: Optional[Mapping[str, Any]] = None,
        settings: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": name}
        if mappings:
            payload["mappings"] = dict(mappings)
        if settings:
            payload["settings"] = dict(settings)
        return self._unwrap(self._http.post(_ENDPOINTS["INDEX"], json=payload), "create_index")

    def delete_index(self, name: str) -> Dict[str, Any]:
        return self._unwrap(self._http.delete(f"{_ENDPOINTS['INDEX']}/{name}"), "delete_index")

    def get_index(self, name: str) -> Dict[str, Any]:
        return self._unwrap(self._http.get(f"{_ENDPOINTS['INDEX']}/{name}"), "get_index")
