"""
Shared embed utilities for the Team Competition stats bot.

Provides reusable embed building functions so every command renders
summaries and leaderboards the same way.
"""

import discord
from typing import Dict, List, Optional
from tcbot.data_models.historic import HistoricStats
from tcbot.data_models.leaderboard import LeaderboardEntry
from tcbot.data_models.stats import CompetitionStats
from tcbot.data_models.summary import CompetitionSummary
from tcbot.database.models import Category
from tcbot.constants import UIConstants


def _truncate(text: str, limit: int = UIConstants.MAX_FIELD_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 4] + "\n..."


def build_summary_embed(summary: CompetitionSummary) -> discord.Embed:
    """
    Build the competition summary embed, one field per team.
    
    Args:
        summary: Current competition summary
        
    Returns:
        Formatted Discord embed ready for display
    """
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} Team Competition Summary",
        description=(
            f"**Points:** {summary.points:,}\n"
            f"**Multiplied Points:** {summary.multiplied_points:,}\n"
            f"**Units:** {summary.units:,}"
        ),
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    
    if not summary.teams:
        embed.description += "\n\nNo teams are competing yet."
        return embed
    
    # Discord allows 25 fields per embed
    for team in summary.teams[:25]:
        lines = [f"**Multiplied Points:** {team.multiplied_points:,} | **Units:** {team.units:,}"]
        if team.captain_name:
            lines.append(f"**Captain:** {team.captain_name}")
        for user in team.active_users:
            lines.append(f"{user.rank_in_team}. {user.display_name} ({user.hardware_name}): {user.multiplied_points:,}")
        for retired in team.retired_users:
            lines.append(f"{retired.rank_in_team}. {retired.display_name} (retired): {retired.multiplied_points:,}")
        
        embed.add_field(
            name=f"#{team.rank} {team.team_name}",
            value=_truncate("\n".join(lines)),
            inline=False
        )
    
    return embed


def build_team_leaderboard_embed(entries: List[LeaderboardEntry]) -> discord.Embed:
    """Build the team leaderboard as a fixed-width table."""
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} Team Leaderboard",
        color=UIConstants.GOLD_RANK_COLOR
    )
    
    if not entries:
        embed.description = "The leaderboard is empty."
        return embed
    
    lines = ["```"]
    lines.append(f"{'Rank':<6} {'Team':<20} {'Points':<14} {'To Leader':<12} {'To Next':<12}")
    lines.append("-" * 66)
    for entry in entries[:UIConstants.MAX_LEADERBOARD_ROWS]:
        lines.append(
            f"{entry.rank:<6} {entry.summary.team_name[:18]:<20} "
            f"{entry.multiplied_points:<14,} {entry.diff_to_leader:<12,} {entry.diff_to_next:<12,}"
        )
    lines.append("```")
    embed.description = "\n".join(lines)
    return embed


def build_category_leaderboard_embed(leaderboards: Dict[Category, List[LeaderboardEntry]],
                                     category: Optional[Category] = None) -> discord.Embed:
    """
    Build the per-category user leaderboard.
    
    Args:
        leaderboards: Ranked users for every category
        category: Only show this category when given
    """
    embed = discord.Embed(
        title="Category Leaderboard",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    
    for current, entries in leaderboards.items():
        if category is not None and current is not category:
            continue
        
        if entries:
            value = "\n".join(
                f"{entry.rank}. {entry.summary.display_name} [{entry.team_name or 'No team'}]: "
                f"{entry.multiplied_points:,} (-{entry.diff_to_leader:,})"
                for entry in entries[:UIConstants.MAX_LEADERBOARD_ROWS]
            )
        else:
            value = "No users in this category."
        embed.add_field(name=current.display_name, value=_truncate(value), inline=False)
    
    return embed


def build_user_stats_embed(display_name: str, team_name: str, hardware_name: str,
                           stats: CompetitionStats) -> discord.Embed:
    """Build the current Team Competition stats of one user."""
    embed = discord.Embed(
        title=f"TC Stats: {display_name}",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    embed.add_field(name="Team", value=team_name, inline=True)
    embed.add_field(name="Hardware", value=hardware_name, inline=True)
    embed.add_field(
        name="Stats",
        value=(
            f"**Points:** {stats.points:,}\n"
            f"**Multiplied Points:** {stats.multiplied_points:,}\n"
            f"**Units:** {stats.units:,}"
        ),
        inline=False
    )
    if stats.timestamp:
        embed.set_footer(text=f"Last updated: {stats.timestamp:%Y-%m-%d %H:%M} UTC")
    return embed


def build_history_embed(title: str, history: List[HistoricStats], period_format: str) -> discord.Embed:
    """
    Build a historic rollup table.
    
    Args:
        title: Embed title
        history: Stats per period, oldest first
        period_format: strftime format used for each period label
    """
    embed = discord.Embed(title=title, color=UIConstants.DEFAULT_EMBED_COLOR)
    
    if not history:
        embed.description = "No stats recorded for this period."
        return embed
    
    lines = ["```"]
    lines.append(f"{'Period':<12} {'Points':<12} {'Multiplied':<14} {'Units':<8}")
    lines.append("-" * 48)
    for stats in history:
        lines.append(
            f"{stats.period_start.strftime(period_format):<12} {stats.points:<12,} "
            f"{stats.multiplied_points:<14,} {stats.units:<8,}"
        )
    lines.append("```")
    embed.description = _truncate("\n".join(lines), 4096)
    return embed
