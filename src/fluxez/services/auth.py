"""Tenant user authentication.

Tokens returned by `login`, `refresh` and `verify_2fa` are handed back to the
caller and never installed on the transport: tenant-auth endpoints keep
authenticating with the API key. Use `FluxezClient.set_auth` to switch.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..constants import API_ENDPOINTS
from ..exceptions import InvalidValueError
from ..schema import AuthToken
from ..utils import drop_none
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["TENANT_AUTH"]


def _to_token(data: Mapping[str, Any]) -> AuthToken:
    data = dict(data)
    if "accessToken" not in data and "access_token" not in data and "token" in data:
        data["accessToken"] = data.pop("token")
    data.setdefault("expiresIn", 3600)
    return AuthToken.model_validate(data)


class AuthClient(ServiceClient):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.current_user: Optional[Dict[str, Any]] = None

    # -------------------
    # Sessions
    # -------------------
    def login(self, email: str, password: str, **extra: Any) -> AuthToken:
        self.logger.debug("Logging in %s", email)
        data = self._unwrap(self._http.post(_ENDPOINTS["LOGIN"], json={"email": email, "password": password, **extra}), "login")
        token = _to_token(data or {})
        self.current_user = token.user
        return token

    def register(self, email: str, password: str, **profile: Any) -> Dict[str, Any]:
        self.logger.debug("Registering %s", email)
        return self._unwrap(
            self._http.post(_ENDPOINTS["REGISTER"], json={"email": email, "password": password, **profile}), "register"
        )

    def refresh(self, refresh_token: str) -> AuthToken:
        data = self._unwrap(self._http.post(_ENDPOINTS["REFRESH"], json={"refreshToken": refresh_token}), "refresh")
        return _to_token(data or {})

    def logout(self) -> None:
        self._http.post(_ENDPOINTS["LOGOUT"])
        self.current_user = None

    def me(self, refresh: bool = False) -> Dict[str, Any]:
        """Return the current user; cached after the first call unless `refresh` is set."""
        if self.current_user is not None and not refresh:
            return self.current_user
        self.current_user = self._unwrap(self._http.get(_ENDPOINTS["ME"]), "me")
        return self.current_user

    def get_sessions(self) -> List[Dict[str, Any]]:
        return self._unwrap(self._http.get(_ENDPOINTS["SESSIONS"]), "get_sessions") or []

    def revoke_session(self, session_id: str) -> None:
        self._http.delete(f"{_ENDPOINTS['SESSIONS']}/{session_id}")

    def revoke_all_sessions(self) -> None:
        self._http.delete(_ENDPOINTS["SESSIONS"])

    # -------------------
    # Users
    # -------------------
    def get_user(self, user_id: str) -> Dict[str, Any]:
        return self._unwrap(self._http.get(f"{_ENDPOINTS['USERS']}/{user_id}"), "get_user")

    def update_user(self, user_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.put(f"{_ENDPOINTS['USERS']}/{user_id}", json=dict(data)), "update_user")

    def delete_user(self, user_id: str) -> Dict[str, Any]:
        return self._unwrap(self._http.delete(f"{_ENDPOINTS['USERS']}/{user_id}"), "delete_user")

    def list_users(self, page: Optional[int] = None, limit: Optional[int] = None, search: Optional[str] = None) -> Dict[str, Any]:
        """Return `{"users": [...], "total": n}`."""
        params = drop_none({"page": page, "limit": limit, "search": search})
        return self._unwrap(self._http.get(_ENDPOINTS["USERS"], params=params), "list_users")

    def search_users(self, query: str, page: Optional[int] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        return self.list_users(page=page, limit=limit, search=query)

    def update_profile(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        user = self._unwrap(self._http.patch(_ENDPOINTS["PROFILE"], json=dict(data)), "update_profile")
        self.current_user = user
        return user

    def get_roles(self) -> List[Dict[str, Any]]:
        data = self._unwrap(self._http.get(_ENDPOINTS["ROLES"]), "get_roles")
        if isinstance(data, dict):
            return data.get("roles") or []
        return data or []

    # -------------------
    # Passwords and verification
    # -------------------
    def request_password_reset(self, email: str, frontend_url: str) -> None:
        """Send a reset email linking to `frontend_url`."""
        if not frontend_url:
            raise InvalidValueError("frontend_url is required for password reset", email=email)
        self._http.post(_ENDPOINTS["FORGOT_PASSWORD"], json={"email": email, "frontendUrl": frontend_url})

    def reset_password(self, token: str, new_password: str) -> None:
        self._http.post(_ENDPOINTS["RESET_PASSWORD"], json={"token": token, "newPassword": new_password})

    def change_password(self, current_password: str, new_password: str) -> None:
        self._http.post(
            _ENDPOINTS["CHANGE_PASSWORD"],
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    def request_email_verification(self) -> None:
        self._http.post(_ENDPOINTS["REQUEST_VERIFICATION"])

    def verify_email(self, token: str) -> None:
        self._http.post(_ENDPOINTS["VERIFY_EMAIL"], json={"token": token})

    # -------------------
    # Two-factor authentication
    # -------------------
    def enable_2fa(self) -> Dict[str, Any]:
        """Return `{"secret": ..., "qrCode": ...}` for the authenticator app."""
        return self._unwrap(self._http.post(f"{_ENDPOINTS['TWO_FACTOR']}/enable"), "enable_2fa")

    def disable_2fa(self, code: str) -> None:
        self._http.post(f"{_ENDPOINTS['TWO_FACTOR']}/disable", json={"code": code})

    def verify_2fa(self, code: str) -> AuthToken:
        data = self._unwrap(self._http.post(f"{_ENDPOINTS['TWO_FACTOR']}/verify", json={"code": code}), "verify_2fa")
        return _to_token(data or {})

    # -------------------
    # API keys
    # -------------------
    def validate_api_key(self, api_key: str) -> bool:
        data = self._unwrap(self._http.post(_ENDPOINTS["VALIDATE_API_KEY"], json={"apiKey": api_key}), "validate_api_key")
        return isinstance(data, dict) and data.get("valid") is True
