"""
Centralized error embeds for consistent error handling across the Team Competition stats bot.

Provides standardized error messages and formatting so every command reports
failures the same way.
"""

import discord

from tcbot.services.system_state import SystemState


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""
    
    @staticmethod
    def user_not_found(name: str) -> discord.Embed:
        """Create embed for when a Team Competition user is not found."""
        return discord.Embed(
            title="User Not Found",
            description=f"No Team Competition user named **{name}**.",
            color=discord.Color.red()
        )
    
    @staticmethod
    def system_unavailable(state: SystemState) -> discord.Embed:
        """Create embed for when the system state blocks the request."""
        return discord.Embed(
            title="Stats Unavailable",
            description=f"The system is currently {state.value.replace('_', ' ').lower()}. Please try again shortly.",
            color=discord.Color.orange()
        )
    
    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Create embed for general command errors."""
        return discord.Embed(
            title="Command Error",
            description=f"An error occurred: {error}\n\nPlease try again or contact an administrator.",
            color=discord.Color.red()
        )
    
    @staticmethod
    def invalid_input(message: str) -> discord.Embed:
        """Create embed for invalid user input."""
        return discord.Embed(
            title="Invalid Input",
            description=message,
            color=discord.Color.red()
        )
    
    @staticmethod
    def permission_denied() -> discord.Embed:
        """Create embed for permission errors."""
        return discord.Embed(
            title="Permission Denied",
            description="You don't have permission to perform this action.",
            color=discord.Color.red()
        )
