# fetchers/http_client.py
import logging
from typing import Any, Dict, Optional
import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from ..config import ViewerConfig
from ..exceptions import FetchError, TransientFetchError
from ..models import FetchResult


class JsonHttpClient:
    """Issues JSON GET requests and reports failures as FetchResult values"""

    def __init__(self, config: ViewerConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def _headers(self) -> Dict[str, str]:
        return {
            'User-Agent': self.config.user_agent,
            'Accept': 'application/geo+json'
        }

    def _request(self, url: str, params: Optional[Dict[str, Any]]) -> Any:
        """Perform a single GET and decode its JSON body"""
        try:
            response = self.session.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.config.request_timeout
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise TransientFetchError(f"Request to {url} failed: {e}")
        except requests.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}")

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            if response.status_code >= 500:
                raise TransientFetchError(f"Request to {url} failed: {e}")
            raise FetchError(f"Request to {url} failed: {e}")

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}")

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> FetchResult[Any]:
        """GET a JSON document, retrying transport failures and 5xx responses"""
        retrying = Retrying(
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=wait_exponential(multiplier=1,
                                  min=self.config.retry_wait_min,
                                  max=self.config.retry_wait_max),
            retry=retry_if_exception_type(TransientFetchError),
            reraise=True
        )
        try:
            for attempt in retrying:
                with attempt:
                    data = self._request(url, params)
            return FetchResult.success(data)
        except FetchError as e:
            self.logger.error(f"Error fetching {url}: {e}")
            return FetchResult.failure(str(e))
