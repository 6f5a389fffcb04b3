"""Text AI operations: generation, chat, code, summaries, translation, embeddings."""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..constants import API_ENDPOINTS
from ..exceptions import AIError, InvalidValueError
from ..utils import drop_none
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["AI_TEXT"]

_ROLES = ("system", "user", "assistant")
_SUMMARY_LENGTHS = ("short", "medium", "long")


class AIClient(ServiceClient):
    error_class = AIError

    def _post(self, key: str, payload: Mapping[str, Any], operation: str) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS[key], json=drop_none(payload)), operation)

    def generate_text(
        self,
        prompt: str,
        system_message: Optional[str] = None,
        save_to_database: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Return `{"text": ..., "contentId": ...}`."""
        payload = {"prompt": prompt, "systemMessage": system_message, "saveToDatabase": save_to_database}
        return self._post("GENERATE", payload, "generate_text")

    def chat(self, messages: Sequence[Mapping[str, str]], save_to_database: Optional[bool] = None) -> Dict[str, Any]:
        """Continue a conversation of `{"role", "content"}` messages."""
        for message in messages:
            if message.get("role") not in _ROLES:
                raise InvalidValueError("Chat message role must be system, user or assistant", role=message.get("role"))
        payload = {"messages": [dict(m) for m in messages], "saveToDatabase": save_to_database}
        return self._post("CHAT", payload, "chat")

    def generate_code(
        self,
        prompt: str,
        language: str = "python",
        framework: Optional[str] = None,
        save_to_database: Optional[bool] = None,
    ) -> Dict[str, Any]:
        payload = {"prompt": prompt, "language": language, "framework": framework, "saveToDatabase": save_to_database}
        return self._post("CODE_GENERATE", payload, "generate_code")

    def summarize_text(self, text: str, length: str = "medium") -> Dict[str, Any]:
        if length not in _SUMMARY_LENGTHS:
            raise InvalidValueError("Summary length must be short, medium or long", length=length)
        return self._post("SUMMARIZE", {"text": text, "length": length}, "summarize_text")

    def translate_text(self, text: str, target_language: str, source_language: Optional[str] = None) -> Dict[str, Any]:
        payload = {"text": text, "targetLanguage": target_language, "sourceLanguage": source_language}
        return self._post("TRANSLATE", payload, "translate_text")

    def generate_embeddings(self, text: Union[str, Sequence[str]], model: Optional[str] = None) -> Dict[str, Any]:
        """Return `{"embeddings": [[...]], "model", "dimensions", "count"}`."""
        value: Union[str, List[str]] = text if isinstance(text, str) else list(text)
        return self._post("EMBEDDINGS", {"text": value, "model": model}, "generate_embeddings")
