import logging
from typing import Any, Optional

import certifi  # Provides Mozilla's CA bundle for SSL certificate verification
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from moviedrop.errors import MissingCredentialError
from moviedrop.settings import Settings, TMDBSettings, get_settings

logger = logging.getLogger(__name__)


class TMDB_APIClient:
    def __init__(self,
                settings: Optional[Settings] = None,
                total_retries: int = 2,
                backoff_factor: float = 0.5,
                status_forcelist: tuple = (429, 500, 502, 503, 504)):
        """
        Initializes a requests.Session with:
            - JSON accept header
            - HTTPAdapter for retries on connection errors and specified HTTP status codes

        The TMDB v3 API key travels as the `api_key` query parameter on every call.

        Raises:
            MissingCredentialError: if no TMDB API key is configured
        """
        cfg = settings or get_settings()
        if cfg.tmdb is None:
            raise MissingCredentialError("TMDB_API_KEY")

        self.tmdb: TMDBSettings = cfg.tmdb
        self.timeout: float = cfg.request_timeout
        self.verify = certifi.where() if cfg.verify_ssl else False
        self.session = requests.Session()

        # Configure retries
        retry_strategy = Retry(
            total=total_retries,
            connect=total_retries,
            read=total_retries,
            backoff_factor=backoff_factor,
            status_forcelist=status_forcelist,
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        # Default headers
        self.session.headers.update({"Accept": "application/json"})

    def _handle_response(self, resp: requests.Response) -> Any:
        """
            Handle API response with proper error checking and JSON parsing.

            Args:
                resp: HTTP response object

            Returns:
                Parsed JSON data

            Raises:
                requests.HTTPError: For 4xx/5xx HTTP status codes
                ValueError: If response is not valid JSON
            """
        try:
            resp.raise_for_status()

            if not resp.content:
                logger.warning(f"Empty response received for {resp.url.split('?')[0]}")
                return {}

            return resp.json()

        except requests.HTTPError:
            # The query string carries the api_key, log the path only
            logger.error(f"HTTP {resp.status_code} error for {resp.url.split('?')[0]}: {resp.text[:200]}")
            raise

        except ValueError as e:
            logger.error(f"Invalid JSON response from TMDB: {resp.text[:200]}...")
            raise ValueError(f"Invalid JSON response: {e}")

    def get(self, path: str, params=None) -> Any:
        """
        Perform a GET request to the TMDb API, returning parsed JSON.

        Timeouts and connection errors surface as requests.RequestException;
        callers in the feed chain treat them like any other upstream failure.
        """
        api_base_url: str = str(self.tmdb.api_base_url)
        url = f"{api_base_url.rstrip('/')}/{path.lstrip('/')}"

        query = dict(params or {})
        query["api_key"] = self.tmdb.api_key.get_secret_value()

        resp = self.session.get(url, params=query, timeout=self.timeout, verify=self.verify)
        return self._handle_response(resp)

    def close(self) -> None:
        self.session.close()
