"""Pydantic schemas for Fluxez responses and payloads."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .utils import extract_count, extract_rows, generate_session_id, utc_now_iso


class _CamelModel(BaseModel):
    """Accepts camelCase wire keys and snake_case attribute names alike."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class QueryResult(BaseModel):
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Result rows.")
    count: Optional[int] = Field(None, description="Server-reported row count.")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Remaining response fields.")

    @classmethod
    def from_response(cls, body: Any) -> "QueryResult":
        """Build a result from a query endpoint body.

        Rows come from `rows`, then `data`, then a bare list body. The count
        comes from `rowCount`, then `count`. Other top-level keys are kept as
        metadata. A `{"data": {...}}` envelope is unwrapped first.
        """
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        metadata: Dict[str, Any] = {}
        if isinstance(body, dict):
            metadata = {k: v for k, v in body.items() if k not in ("rows", "data", "rowCount", "count")}
        return cls(data=extract_rows(body), count=extract_count(body), metadata=metadata)

    def __len__(self) -> int:
        return len(self.data)

    def first(self) -> Optional[Dict[str, Any]]:
        return self.data[0] if self.data else None


class SearchHit(_CamelModel):
    id: Optional[Union[str, int]] = None
    score: Optional[float] = None
    source: Dict[str, Any] = Field(default_factory=dict)
    highlight: Optional[Dict[str, List[str]]] = None


class SearchResult(_CamelModel):
    hits: List[SearchHit] = Field(default_factory=list)
    total: int = 0
    max_score: Optional[float] = Field(None, alias="maxScore")
    took: Optional[int] = None


class UploadResult(_CamelModel):
    url: Optional[str] = None
    key: str
    bucket: Optional[str] = None
    size: Optional[int] = None
    content_type: Optional[str] = Field(None, alias="contentType")
    etag: Optional[str] = None


class StorageFile(_CamelModel):
    key: str
    size: Optional[int] = None
    last_modified: Optional[str] = Field(None, alias="lastModified")
    content_type: Optional[str] = Field(None, alias="contentType")
    etag: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class AuthToken(_CamelModel):
    access_token: str = Field(..., alias="accessToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")
    expires_in: Optional[int] = Field(None, alias="expiresIn")
    token_type: str = Field("Bearer", alias="tokenType")
    user: Optional[Dict[str, Any]] = None


class CacheStats(_CamelModel):
    hits: int = 0
    misses: int = 0
    hit_rate: float = Field(0.0, alias="hitRate")
    total_keys: int = Field(0, alias="totalKeys")
    memory_usage: Optional[int] = Field(None, alias="memoryUsage")


class AnalyticsEvent(_CamelModel):
    event: str = Field(..., min_length=1)
    properties: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = Field(None, alias="userId")
    session_id: str = Field(default_factory=generate_session_id, alias="sessionId")
    timestamp: str = Field(default_factory=utc_now_iso)

    def to_payload(self) -> Dict[str, Any]:
        """Wire form with camelCase keys; unset optional keys are dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)
