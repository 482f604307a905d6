"""
HTTP client for the LARS GPU PPD database.

Returns the ranked GPU list as hardware candidates ready to compare with the
stored hardware.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from tcbot.config import Config
from tcbot.database.models import HardwareMake, HardwareType
from tcbot.utils.exceptions import ExternalConnectionError

logger = logging.getLogger(__name__)

GPU_RANK_LIST_PATH = "/api/gpu_ppd/gpu_rank_list.json"


@dataclass(frozen=True)
class HardwareCandidate:
    """Hardware as reported by LARS, not yet persisted."""
    name: str
    display_name: str
    make: HardwareMake
    hardware_type: HardwareType
    multiplier: float
    average_ppd: int


class LarsClient:
    """Async client for the LARS GPU ranking."""
    
    def __init__(self, url_root: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.url_root = (url_root or Config.LARS_URL_ROOT).rstrip('/')
        self._client = client or httpx.AsyncClient(timeout=Config.HTTP_TIMEOUT_SECONDS, follow_redirects=True)
    
    async def get_gpus(self) -> List[HardwareCandidate]:
        """Retrieve all valid GPUs, or an empty list if LARS cannot be read."""
        url = f"{self.url_root}{GPU_RANK_LIST_PATH}"
        logger.debug(f"Retrieving LARS GPU data from: '{url}'")
        try:
            ranked_gpus = await self._retrieve_ranked_gpus(url)
        except ExternalConnectionError as e:
            logger.warning(f"Error retrieving data from LARS GPU DB: {e}")
            return []
        
        gpus = []
        for gpu in ranked_gpus:
            candidate = self._to_candidate(gpu)
            if candidate:
                gpus.append(candidate)
        return gpus
    
    async def _retrieve_ranked_gpus(self, url: str) -> list:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalConnectionError(url, f"Invalid response (status code: {e.response.status_code})") from e
        except httpx.HTTPError as e:
            raise ExternalConnectionError(url, f"Unable to connect to LARS PPD DB API: {e}") from e
        
        try:
            ranked_gpus = response.json()["ranked_gpus"]
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalConnectionError(url, f"Unable to parse LARS PPD DB response: {e}") from e
        if not isinstance(ranked_gpus, list):
            raise ExternalConnectionError(url, "Expected 'ranked_gpus' to be a list")
        return ranked_gpus
    
    @staticmethod
    def _to_candidate(gpu) -> Optional[HardwareCandidate]:
        try:
            detailed_name = (gpu.get("detailed_name") or "").strip()
            name = (gpu.get("name") or "").strip()
            make = HardwareMake.get(gpu.get("make"))
            multiplier = float(gpu.get("multiplier") or 0)
            average_ppd = int(gpu.get("ppd_average_overall") or 0)
        except (AttributeError, TypeError, ValueError):
            logger.warning(f"Invalid LARS GPU: {gpu}")
            return None
        
        if not detailed_name or not name or make is HardwareMake.INVALID or multiplier <= 0 or average_ppd <= 0:
            logger.warning(f"Invalid LARS GPU: {gpu}")
            return None
        
        return HardwareCandidate(
            name=detailed_name,
            display_name=name,
            make=make,
            hardware_type=HardwareType.GPU,
            multiplier=multiplier,
            average_ppd=average_ppd,
        )
    
    async def close(self):
        await self._client.aclose()
