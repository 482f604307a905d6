"""
Scheduler Cog - Scheduled Stats Jobs & Admin Commands

Runs the Team Competition jobs on UTC schedules:
- hourly stats parsing
- the monthly reset on the first day of stats collection
- the end-of-month final parse and result archive
- the daily LARS hardware sync
Also provides owner-only admin commands to run each job on demand.
"""

import discord
from discord import app_commands
from discord.ext import commands, tasks
from datetime import datetime, time, timezone

from tcbot.config import Config
from tcbot.constants import ScheduleConstants
from tcbot.data_models.stats import StatsOffset
from tcbot.services.system_state import ParsingState
from tcbot.utils.date_utils import is_last_day_of_month, utc_now
from tcbot.utils.error_embeds import ErrorEmbeds
from tcbot.utils.exceptions import TcStatsException
from tcbot.utils.logger import setup_logger

logger = setup_logger(__name__)

HOURLY_PARSE_TIMES = [
    time(hour=hour, minute=Config.STATS_PARSING_SCHEDULE_MINUTE, tzinfo=timezone.utc) for hour in range(24)
]
MONTHLY_RESET_TIME = time(
    hour=Config.STATS_MONTHLY_RESET_HOUR, minute=Config.STATS_MONTHLY_RESET_MINUTE, tzinfo=timezone.utc
)
END_OF_MONTH_TIME = time(
    hour=ScheduleConstants.END_OF_MONTH_HOUR, minute=ScheduleConstants.END_OF_MONTH_MINUTE, tzinfo=timezone.utc
)
LARS_UPDATE_TIME = time(hour=Config.LARS_UPDATE_HOUR, tzinfo=timezone.utc)


def is_stats_collection_day(now: datetime) -> bool:
    """Stats are only parsed from the configured first day until the end of the month."""
    return now.day >= Config.STATS_PARSING_SCHEDULE_FIRST_DAY_OF_MONTH


def is_reset_day(now: datetime) -> bool:
    return now.day == Config.STATS_PARSING_SCHEDULE_FIRST_DAY_OF_MONTH


class SchedulerCog(commands.Cog):
    """Scheduled Team Competition jobs"""
    
    def __init__(self, bot):
        self.bot = bot
        self.logger = logger
    
    @commands.Cog.listener()
    async def on_ready(self):
        """Start the enabled scheduled jobs once the bot is ready"""
        jobs = [
            (Config.ENABLE_STATS_SCHEDULED_PARSING, self.scheduled_stats_parsing),
            (Config.ENABLE_STATS_MONTHLY_RESET, self.scheduled_monthly_reset),
            (Config.ENABLE_MONTHLY_RESULT_STORAGE, self.scheduled_end_of_month),
            (Config.ENABLE_LARS_HARDWARE_UPDATE, self.scheduled_lars_update),
        ]
        for enabled, job in jobs:
            if enabled and not job.is_running():
                job.start()
                self.logger.info(f"SchedulerCog: Started '{job.coro.__name__}'")
            elif not enabled:
                self.logger.warning(f"SchedulerCog: '{job.coro.__name__}' is disabled")
    
    def cog_unload(self):
        """Stop scheduled jobs when cog is unloaded"""
        self.scheduled_stats_parsing.cancel()
        self.scheduled_monthly_reset.cancel()
        self.scheduled_end_of_month.cancel()
        self.scheduled_lars_update.cancel()
        self.logger.info("SchedulerCog: Scheduled jobs stopped")
    
    @tasks.loop(time=HOURLY_PARSE_TIMES)
    async def scheduled_stats_parsing(self):
        """Hourly fire-and-forget stats parse of every user"""
        try:
            if not is_stats_collection_day(utc_now()):
                self.logger.debug("Not parsing stats, competition has not started this month")
                return
            if self.bot.state_manager.parsing_state() == ParsingState.DISABLED:
                self.logger.info("Not parsing stats, parsing is disabled")
                return
            
            users = await self.bot.db.get_all_users()
            self.logger.info(f"Scheduled stats parsing for {len(users)} users")
            self.bot.stats_parser.parse_tc_stats_for_users(users)
        except Exception as e:
            self.logger.error(f"Error in scheduled stats parsing: {e}", exc_info=True)
    
    @tasks.loop(time=MONTHLY_RESET_TIME)
    async def scheduled_monthly_reset(self):
        """Reset the stats on the first day of stats collection"""
        try:
            if not is_reset_day(utc_now()):
                return
            
            self.logger.info("Starting scheduled monthly reset")
            if await self.bot.monthly_reset.reset_stats():
                await self.bot.state_manager.set_parsing_state(ParsingState.ENABLED)
        except Exception as e:
            self.logger.error(f"Error in scheduled monthly reset: {e}", exc_info=True)
    
    @tasks.loop(time=END_OF_MONTH_TIME)
    async def scheduled_end_of_month(self):
        """Final parse and result archive on the last day of the month"""
        try:
            if not is_last_day_of_month(utc_now().date()):
                return
            
            self.logger.info("Starting end of month stats capture")
            users = await self.bot.db.get_all_users()
            await self.bot.stats_parser.parse_tc_stats_for_users_and_wait(users)
            await self.bot.monthly_result.store_monthly_result()
            await self.bot.state_manager.set_parsing_state(ParsingState.DISABLED)
        except Exception as e:
            self.logger.error(f"Error in end of month stats capture: {e}", exc_info=True)
    
    @tasks.loop(time=LARS_UPDATE_TIME)
    async def scheduled_lars_update(self):
        """Daily hardware sync with LARS"""
        try:
            await self.bot.lars_updater.retrieve_hardware_and_persist()
        except Exception as e:
            self.logger.error(f"Error in scheduled LARS update: {e}", exc_info=True)
    
    @scheduled_stats_parsing.before_loop
    @scheduled_monthly_reset.before_loop
    @scheduled_end_of_month.before_loop
    @scheduled_lars_update.before_loop
    async def before_scheduled_job(self):
        """Wait for bot to be ready before starting any scheduled job"""
        await self.bot.wait_until_ready()
    
    async def _check_owner(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != Config.OWNER_DISCORD_ID:
            await interaction.response.send_message(embed=ErrorEmbeds.permission_denied(), ephemeral=True)
            return False
        return True
    
    @staticmethod
    def _success_embed(title: str, description: str) -> discord.Embed:
        return discord.Embed(
            title=f"✅ {title}",
            description=description,
            color=discord.Color.green(),
            timestamp=datetime.now(timezone.utc)
        )
    
    @app_commands.command(name="admin-parse-stats", description="Parse TC stats for all users now (Owner only)")
    async def admin_parse_stats(self, interaction: discord.Interaction):
        if not await self._check_owner(interaction):
            return
        
        users = await self.bot.db.get_all_users()
        task = self.bot.stats_parser.parse_tc_stats_for_users(users)
        if task is None:
            await interaction.response.send_message("⚠️ Stats parsing is already in progress.", ephemeral=True)
            return
        
        self.logger.info(f"Admin stats parse started by {interaction.user.id} ({interaction.user.name}) for {len(users)} users")
        await interaction.response.send_message(
            embed=self._success_embed("Stats Parse Started", f"Parsing stats for **{len(users)}** users in the background."),
            ephemeral=True
        )
    
    @app_commands.command(name="admin-reset-stats", description="Reset all TC stats for a new month (Owner only)")
    async def admin_reset_stats(self, interaction: discord.Interaction):
        if not await self._check_owner(interaction):
            return
        
        await interaction.response.defer(ephemeral=True)
        self.logger.info(f"Admin monthly reset requested by {interaction.user.id} ({interaction.user.name})")
        
        if await self.bot.monthly_reset.reset_stats():
            await self.bot.state_manager.set_parsing_state(ParsingState.ENABLED)
            await interaction.followup.send(embed=self._success_embed("Stats Reset", "All TC stats have been reset."))
        else:
            await interaction.followup.send(embed=ErrorEmbeds.command_error("The reset did not complete, check the logs before re-running."))
    
    @app_commands.command(name="admin-store-monthly-result", description="Store this month's result now (Owner only)")
    async def admin_store_monthly_result(self, interaction: discord.Interaction):
        if not await self._check_owner(interaction):
            return
        
        await interaction.response.defer(ephemeral=True)
        if await self.bot.monthly_result.store_monthly_result():
            await interaction.followup.send(embed=self._success_embed("Result Stored", "This month's leaderboards have been stored."))
        else:
            await interaction.followup.send(embed=ErrorEmbeds.invalid_input("No stats to store for this month."))
    
    @app_commands.command(name="admin-lars-update", description="Update hardware from LARS now (Owner only)")
    async def admin_lars_update(self, interaction: discord.Interaction):
        if not await self._check_owner(interaction):
            return
        
        await interaction.response.defer(ephemeral=True)
        await self.bot.lars_updater.retrieve_hardware_and_persist()
        await interaction.followup.send(embed=self._success_embed("Hardware Updated", "Hardware has been updated from LARS."))
    
    @app_commands.command(name="admin-offset", description="Add an offset to a user's TC stats (Owner only)")
    @app_commands.describe(
        user="Display name of the user",
        points="Points to add (derived from multiplied points when 0)",
        multiplied_points="Multiplied points to add (derived from points when 0)",
        units="Units to add"
    )
    async def admin_offset(self, interaction: discord.Interaction, user: str,
                           points: int = 0, multiplied_points: int = 0, units: int = 0):
        if not await self._check_owner(interaction):
            return
        
        await interaction.response.defer(ephemeral=True)
        try:
            tc_user = await self.bot.db.get_user_by_display_name(user)
            if not tc_user:
                await interaction.followup.send(embed=ErrorEmbeds.user_not_found(user))
                return
            
            offset = StatsOffset.create(points, multiplied_points, units)
            stored = await self.bot.user_lifecycle.apply_offset(tc_user.id, offset)
            self.logger.info(f"Admin offset applied by {interaction.user.id} to user '{tc_user.display_name}': {offset}")
            await interaction.followup.send(embed=self._success_embed(
                "Offset Applied",
                f"**{tc_user.display_name}** now has an offset of {stored.points_offset:,} points, "
                f"{stored.multiplied_points_offset:,} multiplied points and {stored.units_offset:,} units."
            ))
        except TcStatsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.invalid_input(e.user_message))
        except Exception as e:
            self.logger.error(f"Admin offset error: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error(str(e)))
    
    @app_commands.command(name="admin-delete-user", description="Delete a user, retiring their stats (Owner only)")
    @app_commands.describe(user="Display name of the user")
    async def admin_delete_user(self, interaction: discord.Interaction, user: str):
        if not await self._check_owner(interaction):
            return
        
        await interaction.response.defer(ephemeral=True)
        try:
            tc_user = await self.bot.db.get_user_by_display_name(user)
            if not tc_user:
                await interaction.followup.send(embed=ErrorEmbeds.user_not_found(user))
                return
            
            retired = await self.bot.user_lifecycle.delete_user(tc_user.id)
            if retired:
                description = (f"**{retired.display_name}** retired with "
                               f"{retired.stats.multiplied_points:,} multiplied points kept for their team.")
            else:
                description = f"**{tc_user.display_name}** deleted, they had no stats to retire."
            await interaction.followup.send(embed=self._success_embed("User Deleted", description))
        except TcStatsException as e:
            await interaction.followup.send(embed=ErrorEmbeds.invalid_input(e.user_message))
        except Exception as e:
            self.logger.error(f"Admin delete user error: {e}", exc_info=True)
            await interaction.followup.send(embed=ErrorEmbeds.command_error(str(e)))


async def setup(bot):
    await bot.add_cog(SchedulerCog(bot))
