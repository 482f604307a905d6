import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = 'true') -> bool:
    return os.getenv(name, default).lower() == 'true'


class Config:
    """Bot configuration settings"""
    
    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID', 0))
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///tc_stats.db')
    
    # Bot settings
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    
    # External services
    STATS_URL_ROOT = os.getenv('STATS_URL_ROOT', 'https://api2.foldingathome.org')
    LARS_URL_ROOT = os.getenv('LARS_URL_ROOT', 'https://folding.lar.systems')
    MAXIMUM_HTTP_REQUEST_ATTEMPTS = int(os.getenv('MAXIMUM_HTTP_REQUEST_ATTEMPTS', 2))
    SECONDS_BETWEEN_HTTP_REQUEST_ATTEMPTS = int(os.getenv('SECONDS_BETWEEN_HTTP_REQUEST_ATTEMPTS', 20))
    HTTP_TIMEOUT_SECONDS = float(os.getenv('HTTP_TIMEOUT_SECONDS', 30))
    
    # Scheduled stats parsing
    ENABLE_STATS_SCHEDULED_PARSING = _env_flag('ENABLE_STATS_SCHEDULED_PARSING')
    STATS_PARSING_SCHEDULE_MINUTE = int(os.getenv('STATS_PARSING_SCHEDULE_MINUTE', 55))
    STATS_PARSING_SCHEDULE_FIRST_DAY_OF_MONTH = int(os.getenv('STATS_PARSING_SCHEDULE_FIRST_DAY_OF_MONTH', 3))
    
    # Monthly reset and archive
    ENABLE_STATS_MONTHLY_RESET = _env_flag('ENABLE_STATS_MONTHLY_RESET')
    STATS_MONTHLY_RESET_HOUR = int(os.getenv('STATS_MONTHLY_RESET_HOUR', 0))
    STATS_MONTHLY_RESET_MINUTE = int(os.getenv('STATS_MONTHLY_RESET_MINUTE', 15))
    ENABLE_MONTHLY_RESULT_STORAGE = _env_flag('ENABLE_MONTHLY_RESULT_STORAGE')
    
    # Hardware sync
    ENABLE_LARS_HARDWARE_UPDATE = _env_flag('ENABLE_LARS_HARDWARE_UPDATE')
    LARS_UPDATE_HOUR = int(os.getenv('LARS_UPDATE_HOUR', 0))
    
    # Team composition
    USERS_IN_AMD_GPU = int(os.getenv('USERS_IN_AMD_GPU', 1))
    USERS_IN_NVIDIA_GPU = int(os.getenv('USERS_IN_NVIDIA_GPU', 1))
    USERS_IN_WILDCARD = int(os.getenv('USERS_IN_WILDCARD', 1))
    
    # Caching
    CACHE_TTL_SECONDS = int(os.getenv('CACHE_TTL_SECONDS', 3600))
    
    @classmethod
    def get_guild_ids(cls):
        """Get list of guild IDs for command syncing"""
        if cls.DISCORD_GUILD_IDS:
            # Multi-guild support: comma-separated IDs
            try:
                return [int(guild_id.strip()) for guild_id in cls.DISCORD_GUILD_IDS.split(',') if guild_id.strip()]
            except ValueError:
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
        elif cls.DISCORD_GUILD_ID:
            return [cls.DISCORD_GUILD_ID]
        else:
            # Global sync
            return []
    
    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.OWNER_DISCORD_ID:
            raise ValueError("OWNER_DISCORD_ID is required")
        if cls.MAXIMUM_HTTP_REQUEST_ATTEMPTS < 1:
            raise ValueError("MAXIMUM_HTTP_REQUEST_ATTEMPTS must be at least 1")
        if not 0 <= cls.STATS_PARSING_SCHEDULE_MINUTE <= 59:
            raise ValueError("STATS_PARSING_SCHEDULE_MINUTE must be between 0 and 59")
        if not 1 <= cls.STATS_PARSING_SCHEDULE_FIRST_DAY_OF_MONTH <= 28:
            raise ValueError("STATS_PARSING_SCHEDULE_FIRST_DAY_OF_MONTH must be between 1 and 28")
