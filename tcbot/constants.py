"""
Bot-wide constants for the Team Competition stats bot.
"""

class CacheConstants:
    """Constants for caching behavior."""
    
    # Maximum cache size (number of entries)
    DEFAULT_MAX_CACHE_SIZE = 1000

class ScheduleConstants:
    """UTC times for the scheduled stats jobs."""
    
    # End-of-month archive runs just before midnight on the last day
    END_OF_MONTH_HOUR = 23
    END_OF_MONTH_MINUTE = 57

class UIConstants:
    """Constants for Discord UI elements."""
    
    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    GOLD_RANK_COLOR = 0xffd700      # Gold for the leading team
    
    # Discord embed field values are capped at 1024 characters
    MAX_FIELD_LENGTH = 1024
    MAX_LEADERBOARD_ROWS = 20
    
    TROPHY_EMOJI = "🏆"

class StatsConstants:
    """Constants for stats parsing."""
    
    # Concurrent Folding@Home requests during one parsing pass
    MAX_CONCURRENT_USER_PARSES = 10
