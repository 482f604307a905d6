"""
HTTP client for the Folding@Home stats API.

Retrieves a user's cumulative points and completed work units for their
Folding@Home username and passkey.
"""

import asyncio
import logging
from typing import Optional

import httpx

from tcbot.config import Config
from tcbot.data_models.stats import UserStats
from tcbot.database.models import hide_passkey
from tcbot.utils.date_utils import utc_now
from tcbot.utils.exceptions import ExternalConnectionError

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429
# Responses discarded before one is trusted, the API often returns a stale cached value first
MINIMUM_REQUESTS_TO_FLUSH_EXTERNAL_CACHE = 1


class FoldingStatsClient:
    """Async client for the Folding@Home points and units endpoints."""
    
    def __init__(
        self,
        url_root: Optional[str] = None,
        max_attempts: Optional[int] = None,
        seconds_between_attempts: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url_root = (url_root or Config.STATS_URL_ROOT).rstrip('/')
        # Always make at least one request
        self.max_attempts = max(max_attempts if max_attempts is not None else Config.MAXIMUM_HTTP_REQUEST_ATTEMPTS, 1)
        self.seconds_between_attempts = (
            seconds_between_attempts if seconds_between_attempts is not None
            else Config.SECONDS_BETWEEN_HTTP_REQUEST_ATTEMPTS
        )
        self._client = client or httpx.AsyncClient(
            timeout=Config.HTTP_TIMEOUT_SECONDS,
            follow_redirects=True,
            headers={"Content-Type": "application/json", "Cache-Control": "no-cache no-store"},
        )
    
    async def get_total_stats(self, user) -> UserStats:
        """
        Get the current cumulative stats of a user.
        
        Args:
            user: User with folding_user_name and passkey
            
        Returns:
            UserStats timestamped now
            
        Raises:
            ExternalConnectionError: If either request fails or returns an invalid response
        """
        logger.debug(f"Getting stats for username/passkey '{user.folding_user_name}/{hide_passkey(user.passkey)}'")
        points = await self.get_points(user.folding_user_name, user.passkey)
        units = await self.get_units(user.folding_user_name, user.passkey)
        return UserStats(user.id, utc_now(), points, units)
    
    async def get_points(self, folding_user_name: str, passkey: str) -> int:
        url = f"{self.url_root}/user/{folding_user_name}/stats"
        response = await self._send_request(url, {"passkey": passkey})
        try:
            return int(response.json()["earned"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Error parsing the points JSON response from the API: '{response.text}'")
            raise ExternalConnectionError(url, f"Invalid points response: {e}") from e
    
    async def get_units(self, folding_user_name: str, passkey: str) -> int:
        url = f"{self.url_root}/bonus"
        response = await self._send_request(url, {"user": folding_user_name, "passkey": passkey})
        try:
            unit_entries = response.json()
            finished_units = [int(entry["finished"]) for entry in unit_entries]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Error parsing the units JSON response from the API: '{response.text}'")
            raise ExternalConnectionError(url, f"Invalid units response: {e}") from e
        
        if not finished_units:
            logger.warning(f"No valid units found for user/passkey: '{folding_user_name}/{hide_passkey(passkey)}'")
            return 0
        
        # A username/passkey used on multiple teams returns one entry per team, take the lowest to be fair
        units = min(finished_units)
        if len(finished_units) > 1:
            logger.warning(f"Too many unit responses returned for user '{folding_user_name}', using {units} from: {response.text}")
        return units
    
    async def _send_request(self, url: str, params: dict) -> httpx.Response:
        for request_count in range(1, self.max_attempts + 1):
            logger.debug(f"Sending request #{request_count} to {url}")
            try:
                response = await self._client.get(url, params=params)
            except httpx.HTTPError as e:
                logger.warning(f"Connection error retrieving stats from {url}: {e}")
                raise ExternalConnectionError(url, f"Unable to connect to Folding@Home API: {e}") from e
            
            if response.status_code == HTTP_TOO_MANY_REQUESTS:
                logger.debug(f"Received 'too many requests' for request #{request_count} to {url}, sleeping for {self.seconds_between_attempts}s")
                await asyncio.sleep(self.seconds_between_attempts)
                continue
            
            self._validate_response(url, response)
            
            if self.max_attempts == 1 or request_count > MINIMUM_REQUESTS_TO_FLUSH_EXTERNAL_CACHE:
                return response
        
        raise ExternalConnectionError(url, f"No valid response returned after {self.max_attempts} attempts")
    
    @staticmethod
    def _validate_response(url: str, response: httpx.Response):
        if response.status_code != httpx.codes.OK:
            raise ExternalConnectionError(url, f"Invalid response (status code: {response.status_code}): {response.text}")
        if not response.text.strip():
            raise ExternalConnectionError(url, "Empty Folding@Home stats response")
    
    async def close(self):
        await self._client.aclose()
