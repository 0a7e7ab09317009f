import asyncio
import logging
import time
from typing import Any, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
    before_sleep_log,
)

from fantasy_ingest.config import Settings, get_settings
from fantasy_ingest.exceptions import (
    ProviderError,
    ProviderBadRequest,
    ProviderTransient,
    ProviderUnauthorized,
)
from fantasy_ingest.schemas.cargo import CargoQuery

logger = logging.getLogger(__name__)

# MediaWiki API error codes that mean "slow down", not "bad query"
THROTTLE_ERROR_CODES = {"ratelimited", "maxlag", "readonly", "internal_api_error_DBQueryTimeoutError"}


def classify_status(status_code: int, message: str) -> ProviderError:
    if status_code in (401, 403):
        return ProviderUnauthorized(message, status_code=status_code)
    if 400 <= status_code < 500:
        return ProviderBadRequest(message, status_code=status_code)
    return ProviderTransient(message, status_code=status_code)


class AuthState:
    """Process-lifetime login state. Login is attempted at most once."""

    def __init__(self):
        self.attempted = False
        self.authenticated = False

    def reset(self) -> None:
        self.attempted = False
        self.authenticated = False


class LeaguepediaClient:
    """Client for the Leaguepedia Cargo API (https://lol.fandom.com/api.php)"""

    def __init__(
        self,
        settings: Settings | None = None,
        auth_state: AuthState | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = settings or get_settings()
        self.api_url = settings.leaguepedia_api_url
        self.username = settings.leaguepedia_bot_username
        self.password = settings.leaguepedia_bot_password
        self.user_agent = settings.provider_user_agent
        self.min_interval = settings.provider_min_interval_ms / 1000
        self.max_attempts = settings.provider_max_attempts
        self.backoff_base = settings.provider_backoff_base_seconds
        self.timeout = settings.provider_timeout_seconds
        self.auth = auth_state or AuthState()
        self._clock = clock
        self._next_slot_at = 0.0
        self._http: httpx.AsyncClient | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.auth.authenticated

    async def init(self) -> None:
        """Open the shared HTTP client. Login cookies live on it."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def reset(self) -> None:
        """Forget login and pacing state (tests, worker restarts)."""
        self.auth.reset()
        self._next_slot_at = 0.0

    async def _wait_for_slot(self) -> None:
        """
        Reserve the next outbound slot and sleep until it opens.

        Slots are handed out min_interval apart, so concurrent callers are
        serialized by how long they wait.
        """
        now = self._clock()
        slot = max(now, self._next_slot_at)
        self._next_slot_at = slot + self.min_interval
        delay = slot - now
        if delay > 0:
            logger.debug(f"Rate limit: waiting {delay:.3f}s for provider slot")
            await asyncio.sleep(delay)

    async def _send(
        self,
        method: str,
        params: dict | None = None,
        data: dict | None = None,
    ) -> httpx.Response:
        """Single paced HTTP call, errors mapped onto ProviderError kinds."""
        await self.init()
        await self._wait_for_slot()
        kwargs: dict[str, Any] = {"params": params, "timeout": self.timeout}
        if data is not None:
            kwargs["data"] = data
        try:
            response = await self._http.request(method, self.api_url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise classify_status(
                e.response.status_code, f"Leaguepedia HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderTransient(f"Leaguepedia request failed: {e!r}") from e
        return response

    async def _cargo_request(self, params: dict[str, str]) -> list[dict[str, Any]]:
        response = await self._send("GET", params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderTransient("Leaguepedia returned a non-JSON body") from e

        if isinstance(data, dict) and "error" in data:
            error = data["error"] or {}
            code = error.get("code", "unknown")
            info = error.get("info", "")
            if code in THROTTLE_ERROR_CODES:
                raise ProviderTransient(f"Leaguepedia API error {code}: {info}")
            raise ProviderBadRequest(f"Leaguepedia API error {code}: {info}")

        if not isinstance(data, dict) or not isinstance(data.get("cargoquery"), list):
            raise ProviderTransient("Invalid response format from Leaguepedia")

        return [item.get("title", {}) for item in data["cargoquery"]]

    async def ensure_authenticated(self) -> None:
        """
        Log in once per process using a bot password.

        Two-step MediaWiki handshake: fetch a login token, then post the
        credentials with it. Any failure leaves the client anonymous for the
        rest of the process.
        """
        if self.auth.attempted:
            return
        self.auth.attempted = True

        if not self.username or not self.password:
            logger.info("No Leaguepedia bot credentials configured, using anonymous mode")
            return

        try:
            token_response = await self._send(
                "GET",
                params={"action": "query", "meta": "tokens", "type": "login", "format": "json"},
            )
            login_token = token_response.json()["query"]["tokens"]["logintoken"]

            login_response = await self._send(
                "POST",
                params={"action": "login", "format": "json"},
                data={
                    "lgname": self.username,
                    "lgpassword": self.password,
                    "lgtoken": login_token,
                },
            )
            body = login_response.json()
            result = body.get("login") if isinstance(body, dict) else None
            if not isinstance(result, dict):
                raise ProviderUnauthorized(f"Unexpected login response: {body!r}")
            if result.get("result") != "Success":
                raise ProviderUnauthorized(
                    f"Login rejected: {result.get('reason') or result.get('result')}"
                )
        except (ProviderError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Leaguepedia authentication failed, continuing anonymously: {e}")
            return

        self.auth.authenticated = True
        logger.info("Leaguepedia authentication successful")

    async def query(self, cargo_query: CargoQuery) -> list[dict[str, Any]]:
        """
        Run a Cargo query and return the row objects.

        Transient failures are retried with exponential backoff
        (backoff_base, 2x, 4x...). Client errors are raised immediately.
        """
        await self.ensure_authenticated()
        params = cargo_query.to_params()
        attempts = 0
        rows: list[dict[str, Any]] = []

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_base),
            retry=retry_if_exception(lambda e: isinstance(e, ProviderError) and e.retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    logger.debug(
                        f"Cargo request {cargo_query.tables} "
                        f"(attempt {attempts}/{self.max_attempts})"
                    )
                    rows = await self._cargo_request(params)
        except ProviderError as e:
            logger.error(
                f"Cargo query {cargo_query.tables} failed after {attempts} attempt(s) "
                f"(authenticated={self.is_authenticated}): {e}"
            )
            raise

        logger.info(
            f"Cargo query {cargo_query.tables}: {len(rows)} rows "
            f"(attempts={attempts}, authenticated={self.is_authenticated})"
        )
        return rows

    async def test_connection(self) -> bool:
        """Probe the API with a one-row query."""
        try:
            rows = await self.query(
                CargoQuery(tables="ScoreboardGames", fields=["GameId"], limit=1)
            )
        except ProviderError as e:
            logger.error(f"Leaguepedia connection test failed: {e}")
            return False
        connected = len(rows) > 0
        logger.info(f"Leaguepedia connection test: success={connected}")
        return connected


# Singleton instance
_leaguepedia_client: LeaguepediaClient | None = None


def get_leaguepedia_client() -> LeaguepediaClient:
    global _leaguepedia_client
    if _leaguepedia_client is None:
        _leaguepedia_client = LeaguepediaClient()
    return _leaguepedia_client
