"""HTTP client with status classification and optional retries."""
import time
import logging
import requests

logger = logging.getLogger("kubedeck.http")


class APIError(Exception):
    """API request error with status code and response body."""
    def __init__(self, message, status_code=None, response_body=None, source=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.source = source


class HTTPClient:
    """requests.Session wrapper. Retries only retryable statuses and network errors."""

    RETRYABLE_STATUS = {429, 500, 502, 503, 504}
    NON_RETRYABLE_STATUS = {400, 401, 403, 404}

    def __init__(self, base_url, timeout=30, max_retries=0, headers=None, source=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.source = source
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "kubedeck-alerter/1.0"})
        if headers:
            self.session.headers.update(headers)

    def get(self, path="", params=None):
        """Make a GET request."""
        return self._request("GET", path, params=params)

    def post(self, path="", json=None, timeout=None):
        """Make a POST request with a JSON body."""
        return self._request("POST", path, json=json, timeout=timeout)

    def _request(self, method, path, params=None, json=None, timeout=None):
        url = f"{self.base_url}/{path.lstrip('/')}" if path else self.base_url
        timeout = timeout or self.timeout

        last_error = None
        for attempt in range(self.max_retries + 1):
            try:
                start = time.time()
                resp = self.session.request(method, url, params=params, json=json, timeout=timeout)
                latency = int((time.time() - start) * 1000)
                logger.debug(f"{method} {url} → {resp.status_code} ({latency}ms)")

                if resp.status_code == 200:
                    try:
                        return resp.json()
                    except ValueError:
                        return resp.text

                if resp.status_code in self.RETRYABLE_STATUS and attempt < self.max_retries:
                    retry_after = resp.headers.get("Retry-After")
                    wait = float(retry_after) if retry_after else min(2 ** attempt * 2, 60)
                    logger.warning(f"Retryable {resp.status_code} from {url}, waiting {wait:.1f}s (attempt {attempt + 1})")
                    last_error = APIError(f"HTTP {resp.status_code}", status_code=resp.status_code,
                                          response_body=resp.text, source=self.source)
                    time.sleep(wait)
                    continue

                raise APIError(
                    f"HTTP {resp.status_code} from {url}",
                    status_code=resp.status_code,
                    response_body=resp.text,
                    source=self.source,
                )

            except requests.exceptions.RequestException as e:
                logger.warning(f"Request error for {url}: {e} (attempt {attempt + 1})")
                last_error = APIError(f"Request to {url} failed: {e}", source=self.source)
                if attempt < self.max_retries:
                    time.sleep(min(2 ** attempt * 2, 60))

        raise last_error or APIError(f"Max retries exceeded for {url}", source=self.source)
