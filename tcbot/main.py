import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands

from tcbot.config import Config
from tcbot.database.database import Database
from tcbot.database.stats_operations import StatsOperations
from tcbot.operations import StatsReconciler
from tcbot.services import (
    CompetitionSummaryBuilder, FoldingStatsClient, HistoricStatsService, LarsClient, LarsHardwareUpdater,
    LeaderboardService, MonthlyResetCoordinator, MonthlyResultService, StatsCaches, StatsRepository,
    SystemState, SystemStateManager, UserLifecycleService, UserStatsParser
)
from tcbot.utils.logger import setup_logger

class TcStatsBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True
        
        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None
        )
        
        # Attach app command error handler
        self.tree.on_error = self.on_app_command_error
        
        self.db: Optional[Database] = None
        self.state_manager = SystemStateManager()
        self.caches = StatsCaches()
        self.stats_client: Optional[FoldingStatsClient] = None
        self.lars_client: Optional[LarsClient] = None
        self.logger = setup_logger(__name__)
        
    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up Team Competition stats bot...")
        
        # Initialize database
        self.db = Database()
        await self.db.initialize()
        
        self._create_services()
        self.logger.info("Stats services initialized")
        
        # Load cogs
        await self.load_cogs()
        
        # Sync slash commands
        await self._sync_commands()
        
        await self.state_manager.transition(SystemState.AVAILABLE)
        self.logger.info("Team Competition stats bot setup complete!")
    
    def _create_services(self):
        """Wire every stats service onto the bot for the cogs to use"""
        self.stats_repository = StatsRepository(StatsOperations(self.db), self.caches)
        self.stats_client = FoldingStatsClient()
        self.lars_client = LarsClient()
        self.reconciler = StatsReconciler(self.stats_repository)
        
        self.stats_parser = UserStatsParser(
            self.db, self.stats_repository, self.reconciler, self.stats_client, self.state_manager
        )
        self.summary_builder = CompetitionSummaryBuilder(
            self.db, self.stats_repository, self.reconciler, self.caches, self.state_manager
        )
        self.leaderboard_service = LeaderboardService(self.summary_builder)
        self.monthly_reset = MonthlyResetCoordinator(
            self.db, self.stats_repository, self.stats_parser, self.caches, self.state_manager
        )
        self.monthly_result = MonthlyResultService(self.stats_repository, self.leaderboard_service)
        self.historic_stats = HistoricStatsService(self.db, self.stats_repository)
        self.user_lifecycle = UserLifecycleService(
            self.db, self.stats_repository, self.reconciler, self.stats_parser,
            self.stats_client, self.caches, self.state_manager
        )
        self.lars_updater = LarsHardwareUpdater(self.db, self.lars_client, self.user_lifecycle)
        
    async def load_cogs(self):
        """Load all cogs"""
        cogs_to_load = [
            'tcbot.cogs.leaderboard',
            'tcbot.cogs.scheduler',
        ]
        
        for cog in cogs_to_load:
            try:
                await self.load_extension(cog)
                self.logger.info(f"Loaded cog: {cog}")
            except Exception as e:
                self.logger.error(f"Failed to load cog {cog}: {e}", exc_info=True)
    
    async def _sync_commands(self):
        """Sync slash commands with Discord"""
        # Verify commands exist before attempting to sync
        if not self.tree.get_commands():
            self.logger.warning("No application commands found to sync. Check for cog loading errors.")
            return
            
        try:
            guild_ids = Config.get_guild_ids()
            
            if guild_ids:
                # Guild-specific sync (instant updates, works in specified servers)
                self.logger.info(f"Attempting to sync commands to {len(guild_ids)} guild(s): {guild_ids}...")
                
                total_synced = 0
                for guild_id in guild_ids:
                    try:
                        guild = discord.Object(id=guild_id)
                        self.tree.copy_global_to(guild=guild)
                        synced = await self.tree.sync(guild=guild)
                        self.logger.info(f"Successfully synced {len(synced)} command(s) to guild {guild_id}")
                        total_synced += len(synced)
                    except discord.errors.Forbidden:
                        self.logger.error(f"Permission error syncing to guild {guild_id}. Ensure the bot has the 'application.commands' scope and is in the guild.", exc_info=True)
                    except discord.errors.HTTPException as e:
                        self.logger.error(f"HTTP error syncing to guild {guild_id}. Status: {e.status}, Response: {e.text}", exc_info=True)
                
                self.logger.info(f"Multi-guild sync complete: {total_synced} total command instances deployed")
            else:
                # Global sync (can take up to 1 hour, works everywhere)
                self.logger.info("Attempting to sync commands globally... (Note: This can take up to an hour to propagate)")
                synced = await self.tree.sync()
                self.logger.info(f"Successfully synced {len(synced)} command(s) globally")
        except Exception as e:
            self.logger.error(f"Failed to sync commands: {e}", exc_info=True)
                
    async def on_ready(self):
        """Called when the bot is ready"""
        self.logger.info(f'{self.user} has connected to Discord!')
        self.logger.info(f'Bot is in {len(self.guilds)} guilds')
        
        await self.change_presence(
            activity=discord.Game(name="Folding@Home Team Competition | /tc-summary")
        )
    
    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Global error handler for slash commands"""
        command_name = interaction.command.name if interaction.command else 'Unknown'
        if isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"Permission denied for command '{command_name}' by user {interaction.user}")
            error_embed = discord.Embed(
                title="❌ Administrative Privileges Required",
                description="This command is restricted to bot administrators only.",
                color=discord.Color.red()
            )
        else:
            self.logger.error(f"Error in app command '{command_name}': {error}", exc_info=True)
            error_embed = discord.Embed(
                title="❌ An error occurred",
                description="An unexpected error occurred while processing your command. The developers have been notified.",
                color=discord.Color.red()
            )
        
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=error_embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=error_embed, ephemeral=True)
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send error response: {e}")
        
    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down Team Competition stats bot...")
        
        if self.stats_client:
            await self.stats_client.close()
        if self.lars_client:
            await self.lars_client.close()
        if self.db:
            await self.db.close()
            
        await super().close()

async def main():
    """Main entry point"""
    Config.validate()
    
    bot = TcStatsBot()
    
    try:
        await bot.start(Config.DISCORD_TOKEN)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        traceback.print_exc()
    finally:
        await bot.close()

def run():
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    run()
