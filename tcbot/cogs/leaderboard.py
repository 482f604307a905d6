import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from tcbot.database.models import Category
from tcbot.utils.date_utils import utc_now
from tcbot.utils.embeds import (
    build_category_leaderboard_embed, build_history_embed, build_summary_embed,
    build_team_leaderboard_embed, build_user_stats_embed
)
from tcbot.utils.error_embeds import ErrorEmbeds
from tcbot.utils.exceptions import TcStatsException

logger = logging.getLogger(__name__)

CATEGORY_CHOICES = [
    app_commands.Choice(name=category.display_name, value=category.name) for category in Category.valid()
]
HISTORY_CHOICES = [
    app_commands.Choice(name="Hourly (today)", value="hourly"),
    app_commands.Choice(name="Daily (this month)", value="daily"),
    app_commands.Choice(name="Monthly (this year)", value="monthly"),
]


class LeaderboardCog(commands.Cog):
    """Team Competition summary, leaderboard and stats commands"""
    
    def __init__(self, bot):
        self.bot = bot
    
    async def _refuse_if_read_blocked(self, interaction: discord.Interaction) -> bool:
        state = self.bot.state_manager.current()
        if state.is_read_blocked():
            await interaction.followup.send(embed=ErrorEmbeds.system_unavailable(state))
            return True
        return False
    
    @app_commands.command(name="tc-summary", description="View the Team Competition summary")
    async def tc_summary(self, interaction: discord.Interaction):
        """Display every team with its users and stats."""
        await interaction.response.defer()
        if await self._refuse_if_read_blocked(interaction):
            return
        
        try:
            summary = await self.bot.summary_builder.get_competition_summary()
            await interaction.followup.send(embed=build_summary_embed(summary))
        except Exception as e:
            logger.error(f"Error in tc-summary command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while fetching the summary. Please try again later."))
    
    @app_commands.command(name="tc-leaderboard", description="View the Team Competition team leaderboard")
    async def tc_leaderboard(self, interaction: discord.Interaction):
        """Display the teams ranked by multiplied points."""
        await interaction.response.defer()
        if await self._refuse_if_read_blocked(interaction):
            return
        
        try:
            entries = await self.bot.leaderboard_service.get_team_leaderboard()
            await interaction.followup.send(embed=build_team_leaderboard_embed(entries))
        except Exception as e:
            logger.error(f"Error in tc-leaderboard command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while fetching leaderboard data. Please try again later."))
    
    @app_commands.command(name="tc-category", description="View the Team Competition user leaderboard per category")
    @app_commands.describe(category="Only show this category")
    @app_commands.choices(category=CATEGORY_CHOICES)
    async def tc_category(self, interaction: discord.Interaction,
                          category: Optional[app_commands.Choice[str]] = None):
        """Display users ranked within each hardware category."""
        await interaction.response.defer()
        if await self._refuse_if_read_blocked(interaction):
            return
        
        try:
            leaderboards = await self.bot.leaderboard_service.get_category_leaderboard()
            selected = Category.get(category.value) if category else None
            await interaction.followup.send(embed=build_category_leaderboard_embed(leaderboards, selected))
        except Exception as e:
            logger.error(f"Error in tc-category command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while fetching category data. Please try again later."))
    
    @app_commands.command(name="tc-user-stats", description="View a user's current Team Competition stats")
    @app_commands.describe(user="Display name of the user")
    async def tc_user_stats(self, interaction: discord.Interaction, user: str):
        """Display one user's current stats."""
        await interaction.response.defer()
        if await self._refuse_if_read_blocked(interaction):
            return
        
        try:
            tc_user = await self.bot.db.get_user_by_display_name(user)
            if not tc_user:
                await interaction.followup.send(embed=ErrorEmbeds.user_not_found(user))
                return
            
            stats = await self.bot.reconciler.get_current_stats(tc_user)
            await interaction.followup.send(embed=build_user_stats_embed(
                tc_user.display_name, tc_user.team.name, tc_user.hardware.display_name, stats
            ))
        except TcStatsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.invalid_input(e.user_message))
        except Exception as e:
            logger.error(f"Error in tc-user-stats command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while fetching user stats. Please try again later."))
    
    @app_commands.command(name="tc-history", description="View a user's historic Team Competition stats")
    @app_commands.describe(user="Display name of the user", period="Rollup period")
    @app_commands.choices(period=HISTORY_CHOICES)
    async def tc_history(self, interaction: discord.Interaction, user: str, period: app_commands.Choice[str]):
        """Display hourly, daily or monthly stats for a user."""
        await interaction.response.defer()
        if await self._refuse_if_read_blocked(interaction):
            return
        
        try:
            tc_user = await self.bot.db.get_user_by_display_name(user)
            if not tc_user:
                await interaction.followup.send(embed=ErrorEmbeds.user_not_found(user))
                return
            
            now = utc_now()
            if period.value == "hourly":
                history = await self.bot.historic_stats.get_hourly_stats(tc_user.id, now.date())
                embed = build_history_embed(f"Hourly Stats: {tc_user.display_name}", history, "%H:%M")
            elif period.value == "daily":
                history = await self.bot.historic_stats.get_daily_stats(tc_user.id, now.month, now.year)
                embed = build_history_embed(f"Daily Stats: {tc_user.display_name}", history, "%Y-%m-%d")
            else:
                history = await self.bot.historic_stats.get_monthly_stats(tc_user.id, now.year)
                embed = build_history_embed(f"Monthly Stats: {tc_user.display_name}", history, "%Y-%m")
            await interaction.followup.send(embed=embed)
        except Exception as e:
            logger.error(f"Error in tc-history command: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error("An error occurred while fetching historic stats. Please try again later."))


async def setup(bot):
    await bot.add_cog(LeaderboardCog(bot))
