from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Text,
    ForeignKey, Float, BigInteger, Enum as SQLEnum, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from enum import Enum
from typing import Optional

from tcbot.config import Config

Base = declarative_base()

PASSKEY_VISIBLE_CHARACTERS = 8


def hide_passkey(passkey: Optional[str]) -> str:
    """Mask a passkey down to its first 8 characters, e.g. 'abcd1234************************'."""
    if not passkey:
        return ""
    if len(passkey) <= PASSKEY_VISIBLE_CHARACTERS:
        return passkey
    return passkey[:PASSKEY_VISIBLE_CHARACTERS] + "*" * (len(passkey) - PASSKEY_VISIBLE_CHARACTERS)


class HardwareMake(Enum):
    AMD = "amd"
    NVIDIA = "nvidia"
    INTEL = "intel"
    INVALID = "invalid"

    @classmethod
    def get(cls, value: Optional[str]) -> "HardwareMake":
        """Case-insensitive lookup, returning INVALID for unknown makes."""
        if not value:
            return cls.INVALID
        for make in cls:
            if make is not cls.INVALID and make.name == value.strip().upper():
                return make
        return cls.INVALID


class HardwareType(Enum):
    CPU = "cpu"
    GPU = "gpu"
    INVALID = "invalid"

    @classmethod
    def get(cls, value: Optional[str]) -> "HardwareType":
        if not value:
            return cls.INVALID
        for hardware_type in cls:
            if hardware_type is not cls.INVALID and hardware_type.name == value.strip().upper():
                return hardware_type
        return cls.INVALID


class Category(Enum):
    """Hardware category a user competes in, with the makes/types it accepts."""
    AMD_GPU = "amd_gpu"
    NVIDIA_GPU = "nvidia_gpu"
    WILDCARD = "wildcard"
    INVALID = "invalid"

    @property
    def supported_makes(self) -> frozenset:
        if self is Category.AMD_GPU:
            return frozenset({HardwareMake.AMD})
        if self is Category.NVIDIA_GPU:
            return frozenset({HardwareMake.NVIDIA})
        if self is Category.WILDCARD:
            return frozenset({HardwareMake.AMD, HardwareMake.NVIDIA, HardwareMake.INTEL})
        return frozenset()

    @property
    def supported_types(self) -> frozenset:
        if self in (Category.AMD_GPU, Category.NVIDIA_GPU):
            return frozenset({HardwareType.GPU})
        if self is Category.WILDCARD:
            return frozenset({HardwareType.CPU, HardwareType.GPU})
        return frozenset()

    @property
    def display_name(self) -> str:
        """e.g. 'Nvidia GPU' for NVIDIA_GPU"""
        return {
            Category.AMD_GPU: "AMD GPU",
            Category.NVIDIA_GPU: "Nvidia GPU",
            Category.WILDCARD: "Wildcard",
        }.get(self, "Invalid")

    def permitted_users(self) -> int:
        """Maximum number of users of this category on a single team."""
        return {
            Category.AMD_GPU: Config.USERS_IN_AMD_GPU,
            Category.NVIDIA_GPU: Config.USERS_IN_NVIDIA_GPU,
            Category.WILDCARD: Config.USERS_IN_WILDCARD,
        }.get(self, 0)

    def is_hardware_supported(self, hardware: "Hardware") -> bool:
        return hardware.make in self.supported_makes and hardware.hardware_type in self.supported_types

    @classmethod
    def valid(cls) -> list:
        return [category for category in cls if category is not cls.INVALID]

    @classmethod
    def maximum_permitted_amount_for_all_categories(cls) -> int:
        return sum(category.permitted_users() for category in cls.valid())

    @classmethod
    def get(cls, value: Optional[str]) -> "Category":
        if not value:
            return cls.INVALID
        for category in cls.valid():
            if category.name == value.strip().upper():
                return category
        return cls.INVALID


class Hardware(Base):
    __tablename__ = 'hardware'
    
    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, unique=True)
    display_name = Column(String(200), nullable=False)
    make = Column(SQLEnum(HardwareMake), nullable=False)
    hardware_type = Column(SQLEnum(HardwareType), nullable=False)
    multiplier = Column(Float, nullable=False)
    average_ppd = Column(BigInteger, default=1)
    
    users = relationship("User", back_populates="hardware")
    
    def __repr__(self):
        return f"<Hardware(id={self.id}, name='{self.name}', multiplier={self.multiplier})>"


class Team(Base):
    __tablename__ = 'teams'
    
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    forum_link = Column(String(500))
    
    created_at = Column(DateTime, default=func.now())
    
    users = relationship("User", back_populates="team")
    
    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.name}')>"


class User(Base):
    __tablename__ = 'users'
    __table_args__ = (
        UniqueConstraint('folding_user_name', 'passkey', name='uq_user_folding_name_passkey'),
    )
    
    id = Column(Integer, primary_key=True)
    folding_user_name = Column(String(150), nullable=False)
    display_name = Column(String(150), nullable=False)
    passkey = Column(String(32), nullable=False)
    category = Column(SQLEnum(Category), nullable=False)
    profile_link = Column(String(500))
    live_stats_link = Column(String(500))
    is_captain = Column(Boolean, default=False)
    
    hardware_id = Column(Integer, ForeignKey('hardware.id'), nullable=False)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=False)
    
    created_at = Column(DateTime, default=func.now())
    
    # Eager loading keeps users usable after their session closes
    hardware = relationship("Hardware", back_populates="users", lazy="selectin")
    team = relationship("Team", back_populates="users", lazy="selectin")
    
    @property
    def masked_passkey(self) -> str:
        return hide_passkey(self.passkey)
    
    def __repr__(self):
        return (
            f"<User(id={self.id}, folding_user_name='{self.folding_user_name}', "
            f"passkey='{self.masked_passkey}', category={self.category})>"
        )


class UserInitialStats(Base):
    """Raw stats baseline taken at the start of a competition period."""
    __tablename__ = 'user_initial_stats'
    
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    utc_timestamp = Column(DateTime, nullable=False)
    points = Column(BigInteger, nullable=False, default=0)
    units = Column(Integer, nullable=False, default=0)


class UserTotalStats(Base):
    """Latest raw cumulative stats pulled from the Folding@Home stats API."""
    __tablename__ = 'user_total_stats'
    
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    utc_timestamp = Column(DateTime, nullable=False)
    points = Column(BigInteger, nullable=False, default=0)
    units = Column(Integer, nullable=False, default=0)


class UserOffsetTcStats(Base):
    __tablename__ = 'user_offset_tc_stats'
    
    user_id = Column(Integer, ForeignKey('users.id'), primary_key=True)
    utc_timestamp = Column(DateTime, nullable=False)
    offset_points = Column(BigInteger, nullable=False, default=0)
    offset_multiplied_points = Column(BigInteger, nullable=False, default=0)
    offset_units = Column(Integer, nullable=False, default=0)


class UserTcStatsHourly(Base):
    __tablename__ = 'user_tc_stats_hourly'
    
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    utc_timestamp = Column(DateTime, nullable=False, index=True)
    points = Column(BigInteger, nullable=False, default=0)
    multiplied_points = Column(BigInteger, nullable=False, default=0)
    units = Column(Integer, nullable=False, default=0)


class RetiredUserStatsRecord(Base):
    __tablename__ = 'retired_user_stats'
    
    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=False, index=True)
    display_name = Column(String(150), nullable=False)
    utc_timestamp = Column(DateTime, nullable=False)
    points = Column(BigInteger, nullable=False, default=0)
    multiplied_points = Column(BigInteger, nullable=False, default=0)
    units = Column(Integer, nullable=False, default=0)


class MonthlyResultRecord(Base):
    __tablename__ = 'monthly_results'
    __table_args__ = (
        UniqueConstraint('year', 'month', name='uq_monthly_result_month'),
    )
    
    id = Column(Integer, primary_key=True)
    utc_timestamp = Column(DateTime, nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    result_json = Column(Text, nullable=False)
