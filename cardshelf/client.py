from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

from .config import LOGGER, settings
from .errors import ApiError


@dataclass
class BulkResult:
    succeeded: List[int] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)


class CardClient:
    """Thin HTTP client for the card inventory API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.client_timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        resp = self.session.request(
            method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
        )
        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            raise ApiError(
                resp.status_code,
                body.get("error") or resp.reason or "Request failed",
                body.get("fields"),
            )
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def list_cards(
        self,
        page: int = 1,
        limit: int = 10,
        sort_field: Optional[str] = "id",
        sort_order: Optional[str] = "ASC",
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if sort_field and sort_order:
            params.update(sortField=sort_field, sortOrder=sort_order)
        return self._request("GET", "/cards", params=params)

    def search_cards(
        self,
        terms: Mapping[str, Any],
        page: int = 1,
        limit: int = 10,
        sort_field: Optional[str] = "id",
        sort_order: Optional[str] = "ASC",
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {k: v for k, v in terms.items() if v not in (None, "", [])}
        params.update(page=page, limit=limit)
        if sort_field and sort_order:
            params.update(sortField=sort_field, sortOrder=sort_order)
        return self._request("GET", "/search", params=params)

    def query(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """List or search depending on whether any filter is present."""
        paging = {"page", "limit", "sortField", "sortOrder"}
        path = "/search" if any(k not in paging for k in params) else "/cards"
        return self._request("GET", path, params=dict(params))

    def get_card(self, card_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/cards/{card_id}")

    def create_card(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/cards", json=dict(payload))

    def update_card(self, card_id: int, changes: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/cards/{card_id}", json=dict(changes))

    def delete_card(self, card_id: int) -> None:
        self._request("DELETE", f"/cards/{card_id}")

    def recent_players(self) -> List[str]:
        return self._request("GET", "/cards/recent-players")

    def bulk_delete(self, card_ids: Iterable[int]) -> BulkResult:
        """Delete each id with its own request, concurrently. Not atomic."""
        ids = list(dict.fromkeys(card_ids))
        result = BulkResult()
        if not ids:
            return result

        def delete(card_id: int) -> Optional[str]:
            try:
                self.delete_card(card_id)
            except (ApiError, requests.RequestException) as e:
                return str(e)
            return None

        with ThreadPoolExecutor(max_workers=settings.client_workers) as pool:
            for card_id, error in zip(ids, pool.map(delete, ids)):
                if error is None:
                    result.succeeded.append(card_id)
                else:
                    LOGGER.warning(f"Failed to delete card {card_id}: {error}")
                    result.failed[card_id] = error
        return result
