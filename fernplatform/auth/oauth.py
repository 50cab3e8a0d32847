"""Talking to an OAuth / OpenID Connect provider."""

from __future__ import annotations

import base64
import secrets
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote_plus, urlencode

import requests

from fernplatform.auth.authentication import TokenInfo, UserInfo

_TIMEOUT_SECONDS = 10
_LOCAL_LOGIN = "/auth/login"
_ADMIN_GROUP = "admin"
_ADMIN_GROUPS = frozenset({"admin", "/admin"})


class OAuthError(Exception):
    """Raised when the provider rejects a request or answers with something unusable."""


@dataclass
class OAuthSettings:
    """Endpoints, credentials and claim mappings of an OAuth provider."""

    enabled: bool = True
    client_id: str = ""
    client_secret: str = ""
    auth_url: str = ""
    token_url: str = ""
    user_info_url: str = ""
    redirect_url: str = ""
    logout_url: str = ""
    issuer_url: str = ""
    scopes: list[str] = field(default_factory=list)
    user_id_field: str = "sub"
    email_field: str = "email"
    name_field: str = "name"
    groups_field: str = "groups"
    roles_field: str = "roles"
    admin_users: list[str] = field(default_factory=list)
    admin_groups: list[str] = field(default_factory=list)


def _escape(value: str) -> str:
    return quote_plus(value, safe="")


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class OAuthClient:
    """Runs the authorization-code flow against one provider."""

    def __init__(self, settings: OAuthSettings, http: requests.Session | None = None) -> None:
        self._settings = settings
        self._http = http if http is not None else requests.Session()

    def generate_state(self) -> str:
        """Return a random, URL-safe state value for the authorization request."""
        return base64.urlsafe_b64encode(secrets.token_bytes(32)).decode("ascii")

    def build_auth_url(self, state: str) -> str:
        """Return the provider URL that starts the authorization-code flow."""
        params = {
            "response_type": "code",
            "client_id": self._settings.client_id,
            "redirect_uri": self._settings.redirect_url,
            "scope": " ".join(self._settings.scopes),
            "state": state,
        }
        return self._settings.auth_url + "?" + urlencode(sorted(params.items()))

    def exchange_code_for_token(self, code: str) -> TokenInfo:
        """Trade an authorization code for the provider's tokens."""
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._settings.redirect_url,
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
        }
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        try:
            response = self._http.post(
                self._settings.token_url, data=data, headers=headers, timeout=_TIMEOUT_SECONDS
            )
        except requests.RequestException as exc:
            raise OAuthError(f"token request failed: {exc}") from exc

        if response.status_code != 200:
            raise OAuthError(f"token exchange failed: {response.text}")

        payload = self._json_object(response)
        try:
            expires_in = int(payload.get("expires_in") or 0)
        except (TypeError, ValueError) as exc:
            raise OAuthError(f"invalid expires_in in token response: {exc}") from exc
        return TokenInfo(
            access_token=str(payload.get("access_token") or ""),
            refresh_token=str(payload.get("refresh_token") or ""),
            id_token=str(payload.get("id_token") or ""),
            expires_in=expires_in,
        )

    def get_user_info(self, access_token: str) -> UserInfo:
        """Fetch the signed-in user's claims and map them to a ``UserInfo``."""
        headers = {"Authorization": "Bearer " + access_token, "Accept": "application/json"}
        try:
            response = self._http.get(
                self._settings.user_info_url, headers=headers, timeout=_TIMEOUT_SECONDS
            )
        except requests.RequestException as exc:
            raise OAuthError(f"userinfo request failed: {exc}") from exc

        if response.status_code != 200:
            raise OAuthError(
                f"userinfo request failed with status {response.status_code}: {response.text}"
            )

        raw = self._json_object(response)
        settings = self._settings

        def text(key: str) -> str:
            value = raw.get(key)
            return value if isinstance(value, str) else ""

        verified = raw.get("email_verified")
        info = UserInfo(
            sub=text(settings.user_id_field),
            email=text(settings.email_field),
            name=text(settings.name_field),
            picture=text("picture"),
            first_name=text("given_name"),
            last_name=text("family_name"),
            email_verified=verified if isinstance(verified, bool) else False,
            groups=_strings(raw.get(settings.groups_field)),
            roles=_strings(raw.get(settings.roles_field)),
        )
        self.apply_admin_overrides(info)
        return info

    def build_provider_logout_url(self, id_token: str) -> str:
        """Return where to send the browser to end the provider session."""
        settings = self._settings
        if not settings.enabled or not id_token:
            return _LOCAL_LOGIN

        if settings.logout_url:
            separator = "&" if "?" in settings.logout_url else "?"
            url = f"{settings.logout_url}{separator}id_token_hint={_escape(id_token)}"
            return url + self._post_logout_param()

        if settings.issuer_url:
            url = settings.issuer_url.removesuffix("/") + "/protocol/openid-connect/logout"
            url += f"?id_token_hint={_escape(id_token)}"
            return url + self._post_logout_param()

        return _LOCAL_LOGIN

    def apply_admin_overrides(self, user_info: UserInfo) -> None:
        """Add the ``admin`` group to users or groups configured as administrators."""
        settings = self._settings
        is_admin_user = any(
            admin in (user_info.email, user_info.sub) for admin in settings.admin_users
        )
        in_admin_group = any(group in settings.admin_groups for group in user_info.groups)
        if not (is_admin_user or in_admin_group):
            return
        if not any(group in _ADMIN_GROUPS for group in user_info.groups):
            user_info.groups.append(_ADMIN_GROUP)

    def _post_logout_param(self) -> str:
        redirect = self._settings.redirect_url
        if not redirect:
            return ""
        post_logout = redirect.replace("/auth/callback", _LOCAL_LOGIN, 1)
        return f"&post_logout_redirect_uri={_escape(post_logout)}"

    @staticmethod
    def _json_object(response: requests.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise OAuthError(f"invalid JSON from provider: {exc}") from exc
        if not isinstance(payload, dict):
            raise OAuthError("provider response is not a JSON object")
        return payload