"""REST client for the GoHighLevel (LeadConnector) API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class GHLApiError(Exception):
    """Raised when the CRM API rejects a request or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class GHLApiClient:
    """Thin wrapper around ``requests.Session`` scoped to one location."""

    def __init__(
        self,
        *,
        access_token: str,
        location_id: str,
        base_url: str = "https://services.leadconnectorhq.com",
        api_version: str = "2021-07-28",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        **_unused: Any,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.location_id = location_id
        self.api_version = api_version
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {access_token}",
                "Version": api_version,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body."""

        url = f"{self.base_url}/{path.lstrip('/')}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        logger.debug("GHL %s %s params=%s", method, url, params)

        try:
            response = self._session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise GHLApiError(f"GHL API request failed: {exc}") from exc

        if not response.ok:
            body = self._decode(response)
            message = body.get("message") if isinstance(body, dict) else None
            if isinstance(message, list):
                message = "; ".join(str(item) for item in message)
            raise GHLApiError(
                f"GHL API error {response.status_code}: {message or response.reason}",
                status=response.status_code,
                body=body,
            )
        return self._decode(response)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"raw": response.text}

    def test_connection(self) -> Dict[str, Any]:
        """Fetch the configured location to confirm credentials work."""

        data = self.request("GET", f"/locations/{self.location_id}")
        location = data.get("location") if isinstance(data, dict) else None
        return {"locationId": self.location_id, "location": location or data}

    # Contacts

    def search_contacts(
        self, query: Optional[str] = None, limit: int = 25
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"locationId": self.location_id, "pageLimit": limit}
        if query:
            body["query"] = query
        return self.request("POST", "/contacts/search", json=body)

    def get_contact(self, contact_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/contacts/{contact_id}")

    def create_contact(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/contacts/", json={**fields, "locationId": self.location_id})

    def update_contact(self, contact_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/contacts/{contact_id}", json=fields)

    def delete_contact(self, contact_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/contacts/{contact_id}")

    def add_contact_tags(self, contact_id: str, tags: List[str]) -> Dict[str, Any]:
        return self.request("POST", f"/contacts/{contact_id}/tags", json={"tags": tags})

    def remove_contact_tags(self, contact_id: str, tags: List[str]) -> Dict[str, Any]:
        return self.request("DELETE", f"/contacts/{contact_id}/tags", json={"tags": tags})

    # Conversations

    def search_conversations(
        self,
        query: Optional[str] = None,
        contact_id: Optional[str] = None,
        limit: int = 20,
    ) -> Dict[str, Any]:
        params = {
            "locationId": self.location_id,
            "query": query,
            "contactId": contact_id,
            "limit": limit,
        }
        return self.request("GET", "/conversations/search", params=params)

    def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        return self.request("GET", f"/conversations/{conversation_id}")

    def get_messages(self, conversation_id: str, limit: int = 20) -> Dict[str, Any]:
        return self.request(
            "GET", f"/conversations/{conversation_id}/messages", params={"limit": limit}
        )

    def send_message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/conversations/messages", json=payload)

    # Blogs

    def get_blog_sites(self, limit: int = 10, skip: int = 0) -> Dict[str, Any]:
        params = {"locationId": self.location_id, "limit": limit, "skip": skip}
        return self.request("GET", "/blogs/site/all", params=params)

    def get_blog_posts(
        self, blog_id: str, limit: int = 10, offset: int = 0, status: Optional[str] = None
    ) -> Dict[str, Any]:
        params = {
            "locationId": self.location_id,
            "blogId": blog_id,
            "limit": limit,
            "offset": offset,
            "status": status,
        }
        return self.request("GET", "/blogs/posts/all", params=params)
