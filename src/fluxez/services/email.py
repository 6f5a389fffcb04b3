"""Transactional and templated email."""

import html
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..constants import API_ENDPOINTS
from ..exceptions import EmailError
from ..utils import as_list, drop_none
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["EMAIL"]

_TAG_RE = re.compile(r"<[^>]*>")

Recipients = Union[str, Sequence[str]]


def html_to_text(markup: str) -> str:
    """Plain-text alternative of an HTML body: tags stripped, entities decoded."""
    text = _TAG_RE.sub("", markup)
    return " ".join(html.unescape(text).split())


class EmailClient(ServiceClient):
    error_class = EmailError

    def send(self, to: Recipients, subject: str, html_body: str, **options: Any) -> Dict[str, Any]:
        """Send one email; the text part is derived from `html_body` unless given."""
        payload = {
            "to": as_list(to),
            "subject": subject,
            "html": html_body,
            "text": options.pop("text", None) or html_to_text(html_body),
            **options,
        }
        self.logger.debug("Sending email to %d recipient(s)", len(payload["to"]))
        return self._unwrap(self._http.post(_ENDPOINTS["SEND"], json=payload), "send")

    def send_templated(
        self,
        template_name: str,
        to: Recipients,
        template_data: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Dict[str, Any]:
        payload = {
            "templateName": template_name,
            "to": as_list(to),
            "templateData": dict(template_data or {}),
            **options,
        }
        return self._unwrap(self._http.post(_ENDPOINTS["SEND_TEMPLATED"], json=payload), "send_templated")

    def send_bulk(
        self,
        recipients: Sequence[Mapping[str, Any]],
        template_name: str,
        common_data: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Dict[str, Any]:
        """Queue a bulk job; each recipient is `{"email": ..., "data": {...}}`."""
        payload = {
            "templateName": template_name,
            "recipients": [dict(r) for r in recipients],
            "commonData": dict(common_data or {}),
            **options,
        }
        self.logger.debug("Sending bulk email to %d recipient(s)", len(payload["recipients"]))
        return self._unwrap(self._http.post(_ENDPOINTS["SEND_BULK"], json=payload), "send_bulk")

    def queue_email(
        self,
        to: Recipients,
        subject: Optional[str] = None,
        html_body: Optional[str] = None,
        template_name: Optional[str] = None,
        template_data: Optional[Mapping[str, Any]] = None,
        delay: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Queue an email for later delivery, `delay` seconds from now."""
        payload = drop_none(
            {
                "to": as_list(to),
                "subject": subject,
                "html": html_body,
                "templateName": template_name,
                "templateData": dict(template_data) if template_data else None,
                "delay": delay,
            }
        )
        return self._unwrap(self._http.post(_ENDPOINTS["QUEUE"], json=payload), "queue_email")

    def verify_email(self, email: str) -> Dict[str, Any]:
        return self._unwrap(self._http.post(_ENDPOINTS["VERIFY"], json={"email": email}), "verify_email")

    # -------------------
    # Templates
    # -------------------
    def create_template(
        self,
        name: str,
        subject: str,
        html_template: str,
        text_template: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
        variables: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        payload = drop_none(
            {
                "name": name,
                "subject": subject,
                "htmlTemplate": html_template,
                "textTemplate": text_template or html_to_text(html_template),
                "description": description,
                "category": category,
                "variables": variables,
            }
        )
        return self._unwrap(self._http.post(_ENDPOINTS["TEMPLATES"], json=payload), "create_template")

    def get_template(self, template_id: str) -> Dict[str, Any]:
        return self._unwrap(self._http.get(f"{_ENDPOINTS['TEMPLATES']}/{template_id}"), "get_template")

    def list_templates(
        self,
        category: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Return `{"templates": [...], "total": n}`."""
        params = drop_none({"category": category, "limit": limit, "offset": offset})
        return self._unwrap(self._http.get(_ENDPOINTS["TEMPLATES"], params=params), "list_templates")

    def delete_template(self, template_id: str) -> None:
        self._unwrap(self._http.delete(f"{_ENDPOINTS['TEMPLATES']}/{template_id}"), "delete_template")

    def get_stats(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        template_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = drop_none({"startDate": start_date, "endDate": end_date, "templateName": template_name})
        return self._unwrap(self._http.get(_ENDPOINTS["STATS"], params=params), "get_stats")
