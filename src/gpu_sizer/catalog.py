"""
HTTP client for the read-only GPU/model catalog service.

Endpoints:
- GET /gpus, GET /models: full listings
- GET /gpus/{id}, GET /models/{id}: single records
"""

import logging
from functools import partial
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .exceptions import CatalogLookupError

logger = logging.getLogger(__name__)

# Record kind -> collection path on the catalog service
CATALOG_PATHS = {
    "device": "gpus",
    "model": "models",
}


class CatalogClient:
    """Lookup-by-identifier and full-listing access to the catalog."""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _collection(self, kind: str) -> str:
        try:
            return CATALOG_PATHS[kind]
        except KeyError:
            raise ValueError(f"Unknown catalog kind: {kind}") from None

    def _get_json(self, url: str, kind: str, record_id: Optional[str] = None) -> Any:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            raise CatalogLookupError(f"Catalog returned {status} for {url}",
                                     kind=kind, record_id=record_id,
                                     status_code=status) from e
        except ValueError as e:
            raise CatalogLookupError(f"Malformed JSON from {url}",
                                     kind=kind, record_id=record_id) from e
        except requests.RequestException as e:
            raise CatalogLookupError(f"Catalog unreachable at {url}: {e}",
                                     kind=kind, record_id=record_id) from e

    def list_catalog(self, kind: str) -> List[Dict[str, Any]]:
        """Fetch every record of ``kind`` ("device" or "model")."""
        url = f"{self.base_url}/{self._collection(kind)}"
        rows = self._get_json(url, kind)
        if not isinstance(rows, list):
            raise CatalogLookupError(f"Expected a list from {url}", kind=kind)
        logger.info(f"Loaded {len(rows)} {kind} records from catalog")
        return rows

    def fetch_by_id(self, kind: str, record_id: str) -> Dict[str, Any]:
        """Fetch one record; raises CatalogLookupError when not found or unreachable."""
        url = f"{self.base_url}/{self._collection(kind)}/{quote(record_id, safe='')}"
        record = self._get_json(url, kind, record_id)
        if not isinstance(record, dict):
            raise CatalogLookupError(f"Expected an object from {url}",
                                     kind=kind, record_id=record_id)
        return record

    def resolver(self, kind: str):
        """One-argument ``fetch_by_id`` for HydrationScheduler."""
        self._collection(kind)
        return partial(self.fetch_by_id, kind)
