# ================================================================
# File     : client.py
# Purpose  : Microsoft Graph API read-only client for Entra (Azure AD)
# Notes    : Read-only: GET + nextLink paging. No destructive ops.
#            - Proactive refresh if token expires in <5 minutes
#            - Failures raise immediately; nothing is retried here
# ================================================================

import os
import time
import getpass
from typing import Dict, Any, List, Optional

import msal
import requests

from core.errors import ClientUnavailable, ConnectionFailure, QueryFailure
from core.utils import fncPrintMessage

GRAPH_HOST = "https://graph.microsoft.com"
DEFAULT_AUTHORITY = "https://login.microsoftonline.com"
REQUEST_TIMEOUT = 60


class GraphClient:
    def __init__(
        self,
        tenant_id: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        authority: Optional[str] = None,
        interactive: bool = True,
        session: Optional[requests.Session] = None,
    ):
        # Try environment variables first
        tenant_id = tenant_id or os.getenv("GROUPMFAREPORT_TENANT_ID")
        client_id = client_id or os.getenv("GROUPMFAREPORT_CLIENT_ID")
        client_secret = client_secret or os.getenv("GROUPMFAREPORT_CLIENT_SECRET")

        missing = [
            name for name, val in (
                ("tenant_id", tenant_id), ("client_id", client_id), ("client_secret", client_secret)
            ) if not val
        ]
        if missing and not interactive:
            raise ClientUnavailable(f"Missing Entra credentials: {', '.join(missing)}")

        # Prompt interactively if any credential is missing
        if not tenant_id:
            tenant_id = input("Enter Tenant ID: ").strip()
        if not client_id:
            client_id = input("Enter Application (Client) ID: ").strip()
        if not client_secret:
            fncPrintMessage(
                "No Client Secret found *Hidden* "
                "Credentials are stored in environment only for this session.",
                "warn",
            )
            client_secret = getpass.getpass("Enter Client Secret (input hidden): ").strip()

        if not all([tenant_id, client_id, client_secret]):
            raise ClientUnavailable("Entra credentials are incomplete.")

        # Persist to environment for the lifetime of the session
        os.environ["GROUPMFAREPORT_TENANT_ID"] = tenant_id
        os.environ["GROUPMFAREPORT_CLIENT_ID"] = client_id
        os.environ["GROUPMFAREPORT_CLIENT_SECRET"] = client_secret

        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.http = session or requests.Session()

        # Application scope (app-only). The app needs GroupMember.Read.All,
        # User.Read.All and UserAuthenticationMethod.Read.All.
        self.scope = [f"{GRAPH_HOST}/.default"]
        self.authority = f"{(authority or DEFAULT_AUTHORITY).rstrip('/')}/{tenant_id}"

        fncPrintMessage("Initialising Microsoft Graph (read-only) client...", "info")

        try:
            self.app = msal.ConfidentialClientApplication(
                client_id=self.client_id,
                client_credential=self.client_secret,
                authority=self.authority,
            )
        except (ValueError, requests.RequestException) as ex:
            raise ConnectionFailure(f"Could not reach authority {self.authority}: {ex}") from ex

        # token/bookkeeping
        self.token: str = ""
        self._token_expires_on: int = 0  # epoch seconds
        self._set_token(self._acquire_token())

        fncPrintMessage("GraphClient initialised (read-only).", "success")

    # ---------- Token helpers ----------

    def _acquire_token(self) -> Dict[str, Any]:
        """Acquire a token using MSAL (silent -> client creds). Returns MSAL result dict."""
        fncPrintMessage("Requesting Microsoft Graph access token...", "debug")
        try:
            result = self.app.acquire_token_silent(self.scope, account=None)
            if not result:
                result = self.app.acquire_token_for_client(scopes=self.scope)
        except (ValueError, requests.RequestException) as ex:
            raise ConnectionFailure(f"MSAL token request failed: {ex}") from ex
        if not result or "access_token" not in result:
            detail = (result or {}).get("error_description", "Unknown error")
            raise ConnectionFailure(f"MSAL Authentication failed: {detail}")
        return result

    def _set_token(self, msal_result: Dict[str, Any]) -> None:
        """Store token and expiry from MSAL result."""
        self.token = msal_result["access_token"]
        try:
            self._token_expires_on = int(msal_result.get("expires_on") or 0)
        except (TypeError, ValueError):
            self._token_expires_on = 0
        if not self._token_expires_on:
            self._token_expires_on = int(time.time()) + int(msal_result.get("expires_in", 3600))

    def _ensure_fresh_token(self) -> None:
        """Proactively refresh token if it expires in <5 minutes."""
        now = int(time.time())
        if now >= (self._token_expires_on - 300):
            fncPrintMessage("Refreshing access token (nearing expiry)...", "debug")
            self._set_token(self._acquire_token())

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }

    # ---------- HTTP handling ----------

    def _handle_response(self, response: requests.Response) -> Dict[str, Any]:
        status = response.status_code

        if status >= 400:
            try:
                err = (response.json().get("error") or {})
            except ValueError:
                err = {}
            code = err.get("code") or ""
            msg = err.get("message") or response.text
            fncPrintMessage(f"Graph API Error [{status}] -> {code} {msg}", "debug")
            raise QueryFailure(f"Graph API request failed with status {status}: {code or msg}", status=status, code=code)

        if status == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as ex:
            raise QueryFailure(f"Graph API returned a non-JSON body (status {status})", status=status) from ex

    def _request(self, method: str, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Single HTTP request with proactive token refresh."""
        self._ensure_fresh_token()
        try:
            resp = self.http.request(method, url, headers=self._auth_headers(), params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as ex:
            raise QueryFailure(f"Graph API request to {url} failed: {ex}") from ex
        return self._handle_response(resp)

    @staticmethod
    def _url(endpoint: str, api_version: str) -> str:
        return f"{GRAPH_HOST}/{api_version}/{endpoint.strip().lstrip('/')}"

    # ---------- Public API ----------

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, api_version: str = "v1.0") -> Dict[str, Any]:
        """
        Perform a GET request to a Graph endpoint (single page).
        Use get_all for collections.
        """
        url = self._url(endpoint, api_version)
        fncPrintMessage(f"GET {url}", "debug")
        return self._request("GET", url, params=params)

    def get_all(self, endpoint: str, params: Optional[Dict[str, Any]] = None, api_version: str = "v1.0") -> List[Dict[str, Any]]:
        """
        Retrieve a whole collection from a Graph endpoint as one flat list.
        Graph paging (@odata.nextLink) is followed until exhausted.
        Example: client.get_all("groups/{id}/members?$select=id,mail")
        """
        url = self._url(endpoint, api_version)
        fncPrintMessage(f"GET (all pages) {url}", "debug")

        data = self._request("GET", url, params=params)
        if not isinstance(data, dict) or "value" not in data:
            return [data] if data else []

        items: List[Dict[str, Any]] = list(data.get("value") or [])
        next_link = data.get("@odata.nextLink")

        while next_link:
            fncPrintMessage(f"Following nextLink -> {next_link}", "debug")
            page = self._request("GET", next_link)
            items.extend(page.get("value") or [])
            next_link = page.get("@odata.nextLink")

        return items
