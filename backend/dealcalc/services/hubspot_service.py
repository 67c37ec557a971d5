"""
HubSpot CRM API client for deals and line items.
Uses Bearer token auth, requests library, and relays HubSpot's error status/body to callers.
"""

import logging
from typing import Any

import requests
from fastapi import status

from dealcalc.core.config import get_settings

logger = logging.getLogger(__name__)

# HubSpot batch endpoints accept at most 100 inputs per call
BATCH_READ_LIMIT = 100
# v4 associations list page size (HubSpot maximum)
ASSOCIATIONS_PAGE_SIZE = 500
# HUBSPOT_DEFINED association type: line item -> deal
LINE_ITEM_TO_DEAL_ASSOCIATION_TYPE_ID = 20


class HubSpotServiceError(Exception):
    """Raised when a HubSpot API call fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class HubSpotService:
    """
    HubSpot API v3/v4 service for the calculator: deal read/patch, deal line-item
    association lookup, and line-item batch read/create/update. One attempt per call.
    """

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._token = access_token or settings.hubspot_token
        self._base_url = base_url or settings.hubspot_base_url
        self._timeout = timeout if timeout is not None else settings.hubspot_timeout

    def _get_headers(self) -> dict[str, str]:
        """Build request headers with Bearer token."""
        if not self._token:
            raise HubSpotServiceError(
                "HubSpot access token not configured. Set HUBSPOT_TOKEN in environment.",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    def _handle_error(self, response: requests.Response) -> None:
        """Interpret error response and raise HubSpotServiceError with detail."""
        try:
            body = response.json()
        except ValueError:
            body = response.text or None
        msg = f"HubSpot API error: {response.status_code}"
        if isinstance(body, dict):
            detail = body.get("message") or body.get("status")
            if body.get("category"):
                msg += f" ({body['category']})"
            if isinstance(detail, str):
                msg += f": {detail}"
        elif isinstance(body, str) and body:
            msg += f": {body[:500]}"
        logger.warning(msg)
        raise HubSpotServiceError(msg, status_code=response.status_code, detail=body)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | list[Any] | None = None,
    ) -> dict[str, Any] | list[Any]:
        """
        Execute one HTTP request against HubSpot.
        path: e.g. /crm/v3/objects/deals (no leading slash required).
        """
        url = f"{self._base_url.rstrip('/')}/{path.lstrip('/')}"
        headers = self._get_headers()
        try:
            resp = requests.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("HubSpot %s %s failed: %s", method, path, e)
            raise HubSpotServiceError(
                f"HubSpot request failed: {e!s}",
                status_code=status.HTTP_502_BAD_GATEWAY,
            ) from e

        if not resp.ok:
            self._handle_error(resp)
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    # -------------------------------------------------------------------------
    # Deals
    # -------------------------------------------------------------------------

    def get_deal(
        self,
        deal_id: str,
        properties: list[str] | None = None,
    ) -> dict[str, Any]:
        """Fetch a single deal by ID."""
        params: dict[str, Any] = {}
        if properties:
            params["properties"] = ",".join(properties)
        data = self._request(
            "GET",
            f"/crm/v3/objects/deals/{deal_id}",
            params=params or None,
        )
        if not isinstance(data, dict):
            raise HubSpotServiceError(f"Unexpected response for deal {deal_id}")
        return data

    def update_deal(
        self,
        deal_id: str,
        properties: dict[str, Any],
    ) -> dict[str, Any]:
        """Patch properties on an existing deal."""
        data = self._request(
            "PATCH",
            f"/crm/v3/objects/deals/{deal_id}",
            json={"properties": properties},
        )
        if not isinstance(data, dict):
            raise HubSpotServiceError(f"Unexpected response when updating deal {deal_id}")
        return data

    # -------------------------------------------------------------------------
    # Line items
    # -------------------------------------------------------------------------

    def get_deal_line_item_ids(self, deal_id: str) -> list[str]:
        """All line-item IDs associated with a deal, following paging cursors to the end."""
        ids: list[str] = []
        after: str | None = None
        while True:
            params: dict[str, Any] = {"limit": ASSOCIATIONS_PAGE_SIZE}
            if after:
                params["after"] = after
            data = self._request(
                "GET",
                f"/crm/v4/objects/deals/{deal_id}/associations/line_items",
                params=params,
            )
            if not isinstance(data, dict):
                break
            for assoc in data.get("results") or []:
                to_id = assoc.get("toObjectId")
                if to_id is not None:
                    ids.append(str(to_id))
            after = ((data.get("paging") or {}).get("next") or {}).get("after")
            if not after:
                break
        return ids

    def batch_read_line_items(
        self,
        line_item_ids: list[str],
        properties: list[str],
    ) -> list[dict[str, Any]]:
        """Batch fetch line items by IDs, BATCH_READ_LIMIT per request."""
        results: list[dict[str, Any]] = []
        for start in range(0, len(line_item_ids), BATCH_READ_LIMIT):
            chunk = line_item_ids[start:start + BATCH_READ_LIMIT]
            body = {
                "properties": properties,
                "inputs": [{"id": lid} for lid in chunk],
            }
            data = self._request("POST", "/crm/v3/objects/line_items/batch/read", json=body)
            results.extend(_batch_results(data))
        return results

    def batch_create_line_items(
        self,
        deal_id: str,
        properties_list: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Create line items in one call, each associated to the deal."""
        if not properties_list:
            return []
        association = {
            "to": {"id": str(deal_id)},
            "types": [
                {
                    "associationCategory": "HUBSPOT_DEFINED",
                    "associationTypeId": LINE_ITEM_TO_DEAL_ASSOCIATION_TYPE_ID,
                }
            ],
        }
        body = {
            "inputs": [
                {"properties": props, "associations": [association]}
                for props in properties_list
            ]
        }
        data = self._request("POST", "/crm/v3/objects/line_items/batch/create", json=body)
        _raise_batch_errors(data, "create")
        return _batch_results(data)

    def batch_update_line_items(
        self,
        updates: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Update line items in one call. updates: [{'id': ..., 'properties': {...}}]."""
        if not updates:
            return []
        data = self._request(
            "POST",
            "/crm/v3/objects/line_items/batch/update",
            json={"inputs": updates},
        )
        _raise_batch_errors(data, "update")
        return _batch_results(data)


def _raise_batch_errors(data: dict[str, Any] | list[Any], action: str) -> None:
    """HubSpot reports partly failed batch writes as 207 with an errors list; treat any error as failure."""
    if not isinstance(data, dict) or not data.get("errors"):
        return
    errors = data["errors"]
    first = errors[0] if isinstance(errors[0], dict) else {}
    msg = f"HubSpot batch {action} failed for {data.get('numErrors') or len(errors)} line item(s)"
    if first.get("category"):
        msg += f" ({first['category']})"
    if isinstance(first.get("message"), str):
        msg += f": {first['message']}"
    logger.warning(msg)
    raise HubSpotServiceError(msg, status_code=status.HTTP_207_MULTI_STATUS, detail=data)


def _batch_results(data: dict[str, Any] | list[Any]) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and "results" in data:
        return data["results"]
    return []


def get_hubspot_service() -> HubSpotService:
    """Dependency: return a HubSpotService instance."""
    return HubSpotService()
