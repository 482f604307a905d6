"""
Base service class for the Team Competition stats bot.

Provides shared storage access and retry logic for service layer operations.
"""

import asyncio
import logging
from typing import Callable, Any

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for services built on the database and stats storage."""
    
    def __init__(self, database, stats_repository):
        """
        Initialize base service with its storage collaborators.
        
        Args:
            database: Database instance for hardware, team and user CRUD
            stats_repository: StatsRepository for cached access to the stats tables
        """
        self.db = database
        self.stats = stats_repository
    
    async def execute_with_retry(self, func: Callable, max_retries: int = 3) -> Any:
        """Execute a function with automatic retry on database errors."""
        for attempt in range(max_retries):
            try:
                return await func()
            except Exception as e:
                if attempt == max_retries - 1:
                    raise
                logger.warning(f"Retry attempt {attempt + 1} for {func.__name__}: {e}")
                await asyncio.sleep(0.1 * (2 ** attempt))  # Exponential backoff
