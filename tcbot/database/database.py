from typing import Optional, List
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import select, update, delete, func
from contextlib import asynccontextmanager

from tcbot.config import Config
from tcbot.database.models import (
    Base, Hardware, Team, User, HardwareMake, HardwareType, Category,
    UserInitialStats, UserTotalStats, UserOffsetTcStats, UserTcStatsHourly
)
from tcbot.utils.exceptions import HardwareNotFoundError, TeamNotFoundError, UserNotFoundError
from tcbot.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = None
        self.async_session = None
        
    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")
        
        # Convert sqlite URL to async if needed
        database_url = self.database_url
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        
        self.engine = create_async_engine(
            database_url,
            echo=Config.DEBUG,
            future=True
        )
        
        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            
        self.logger.info("Database initialized successfully")
    
    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
    
    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")
    
    # Hardware operations
    async def get_all_hardware(self) -> List[Hardware]:
        async with self.get_session() as session:
            result = await session.execute(select(Hardware).order_by(Hardware.id))
            return list(result.scalars().all())
    
    async def get_hardware(self, hardware_id: int) -> Optional[Hardware]:
        async with self.get_session() as session:
            return await session.get(Hardware, hardware_id)
    
    async def get_hardware_by_name(self, name: str) -> Optional[Hardware]:
        """Case-insensitive lookup by hardware name"""
        async with self.get_session() as session:
            result = await session.execute(
                select(Hardware).where(func.lower(Hardware.name) == name.lower())
            )
            return result.scalar_one_or_none()
    
    async def create_hardware(self, name: str, display_name: str, make: HardwareMake,
                              hardware_type: HardwareType, multiplier: float, average_ppd: int = 1) -> Hardware:
        if multiplier <= 0:
            raise ValueError(f"Hardware multiplier must be positive, got {multiplier}")
        async with self.get_session() as session:
            hardware = Hardware(
                name=name,
                display_name=display_name,
                make=make,
                hardware_type=hardware_type,
                multiplier=multiplier,
                average_ppd=average_ppd
            )
            session.add(hardware)
            await session.commit()
            await session.refresh(hardware)
            return hardware
    
    async def update_hardware(self, hardware_id: int, **changes) -> Hardware:
        """Update hardware fields, returning the updated hardware"""
        if 'multiplier' in changes and changes['multiplier'] <= 0:
            raise ValueError(f"Hardware multiplier must be positive, got {changes['multiplier']}")
        async with self.get_session() as session:
            hardware = await session.get(Hardware, hardware_id)
            if not hardware:
                raise HardwareNotFoundError(hardware_id)
            for field_name, value in changes.items():
                setattr(hardware, field_name, value)
            await session.commit()
            return hardware
    
    async def delete_hardware(self, hardware_id: int):
        async with self.get_session() as session:
            result = await session.execute(delete(Hardware).where(Hardware.id == hardware_id))
            if result.rowcount == 0:
                raise HardwareNotFoundError(hardware_id)
            await session.commit()
    
    async def is_hardware_in_use(self, hardware_id: int) -> bool:
        async with self.get_session() as session:
            count = await session.scalar(
                select(func.count(User.id)).where(User.hardware_id == hardware_id)
            )
            return (count or 0) > 0
    
    # Team operations
    async def get_all_teams(self) -> List[Team]:
        async with self.get_session() as session:
            result = await session.execute(select(Team).order_by(Team.id))
            return list(result.scalars().all())
    
    async def get_team(self, team_id: int) -> Optional[Team]:
        async with self.get_session() as session:
            return await session.get(Team, team_id)
    
    async def get_team_by_name(self, name: str) -> Optional[Team]:
        async with self.get_session() as session:
            result = await session.execute(
                select(Team).where(func.lower(Team.name) == name.lower())
            )
            return result.scalar_one_or_none()
    
    async def create_team(self, name: str, description: str = None, forum_link: str = None) -> Team:
        async with self.get_session() as session:
            team = Team(name=name, description=description, forum_link=forum_link)
            session.add(team)
            await session.commit()
            await session.refresh(team)
            return team
    
    async def update_team(self, team_id: int, **changes) -> Team:
        async with self.get_session() as session:
            team = await session.get(Team, team_id)
            if not team:
                raise TeamNotFoundError(team_id)
            for field_name, value in changes.items():
                setattr(team, field_name, value)
            await session.commit()
            return team
    
    async def delete_team(self, team_id: int):
        async with self.get_session() as session:
            result = await session.execute(delete(Team).where(Team.id == team_id))
            if result.rowcount == 0:
                raise TeamNotFoundError(team_id)
            await session.commit()
    
    # User operations
    async def get_all_users(self) -> List[User]:
        async with self.get_session() as session:
            result = await session.execute(select(User).order_by(User.id))
            return list(result.scalars().all())
    
    async def get_users_on_team(self, team_id: int) -> List[User]:
        async with self.get_session() as session:
            result = await session.execute(
                select(User).where(User.team_id == team_id).order_by(User.id)
            )
            return list(result.scalars().all())
    
    async def get_users_with_hardware(self, hardware_id: int) -> List[User]:
        async with self.get_session() as session:
            result = await session.execute(
                select(User).where(User.hardware_id == hardware_id).order_by(User.id)
            )
            return list(result.scalars().all())
    
    async def get_user(self, user_id: int) -> Optional[User]:
        async with self.get_session() as session:
            return await session.get(User, user_id)
    
    async def get_user_by_display_name(self, display_name: str) -> Optional[User]:
        async with self.get_session() as session:
            result = await session.execute(
                select(User).where(func.lower(User.display_name) == display_name.lower())
            )
            return result.scalars().first()
    
    async def create_user(self, folding_user_name: str, display_name: str, passkey: str, category: Category,
                          hardware_id: int, team_id: int, is_captain: bool = False,
                          profile_link: str = None, live_stats_link: str = None) -> User:
        """Create a user; a new captain takes over captaincy of their team"""
        async with self.get_session() as session:
            if not await session.get(Hardware, hardware_id):
                raise HardwareNotFoundError(hardware_id)
            if not await session.get(Team, team_id):
                raise TeamNotFoundError(team_id)
            
            if is_captain:
                await self._remove_captaincy(session, team_id)
            
            user = User(
                folding_user_name=folding_user_name,
                display_name=display_name,
                passkey=passkey,
                category=category,
                hardware_id=hardware_id,
                team_id=team_id,
                is_captain=is_captain,
                profile_link=profile_link,
                live_stats_link=live_stats_link
            )
            session.add(user)
            await session.commit()
            user_id = user.id
        
        self.logger.info(f"Created user '{display_name}' (ID: {user_id})")
        return await self.get_user(user_id)
    
    async def update_user(self, user_id: int, **changes) -> User:
        """Update user fields, returning the reloaded user"""
        async with self.get_session() as session:
            user = await session.get(User, user_id)
            if not user:
                raise UserNotFoundError(user_id)
            if 'hardware_id' in changes and not await session.get(Hardware, changes['hardware_id']):
                raise HardwareNotFoundError(changes['hardware_id'])
            if 'team_id' in changes and not await session.get(Team, changes['team_id']):
                raise TeamNotFoundError(changes['team_id'])
            
            if changes.get('is_captain'):
                await self._remove_captaincy(session, changes.get('team_id', user.team_id), exclude_user_id=user_id)
            
            for field_name, value in changes.items():
                setattr(user, field_name, value)
            await session.commit()
        
        return await self.get_user(user_id)
    
    async def delete_user(self, user_id: int):
        """Delete a user together with all of their stats rows"""
        async with self.get_session() as session:
            for stats_table in (UserInitialStats, UserTotalStats, UserTcStatsHourly):
                await session.execute(delete(stats_table).where(stats_table.user_id == user_id))
            await session.execute(delete(UserOffsetTcStats).where(UserOffsetTcStats.user_id == user_id))
            result = await session.execute(delete(User).where(User.id == user_id))
            if result.rowcount == 0:
                await session.rollback()
                raise UserNotFoundError(user_id)
            await session.commit()
        self.logger.info(f"Deleted user with ID {user_id}")
    
    async def _remove_captaincy(self, session: AsyncSession, team_id: int, exclude_user_id: Optional[int] = None):
        query = update(User).where(User.team_id == team_id, User.is_captain == True)
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await session.execute(query.values(is_captain=False))
        if result.rowcount:
            self.logger.info(f"Removed captaincy from existing captain of team {team_id}")
