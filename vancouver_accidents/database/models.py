"""SQLAlchemy ORM models for the four accident facet tables."""

from sqlalchemy import Column, Float, Integer, SmallInteger, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=False)
    animal = Column(String(255), nullable=False)  # Yes/No
    cyclist = Column(String(255), nullable=False)
    heavy_vehicle = Column(String(255), nullable=False)
    intersection_crash = Column(String(255), nullable=False)
    motorcycle = Column(String(255), nullable=False)
    parked_vehicle = Column(String(255), nullable=False)
    parking_lot = Column(String(255), nullable=False)
    pedestrian = Column(String(255), nullable=False)
    mid_block = Column(String(255), nullable=False)
    crash_severity = Column(String(255), nullable=False)  # CASUALTY CRASH / PROPERTY DAMAGE


class Time(Base):
    __tablename__ = "times"

    id = Column(Integer, primary_key=True, autoincrement=False)
    time_of_day = Column(String(255), nullable=False)  # e.g. 15:00-17:59
    day_of_week = Column(String(255), nullable=False)
    month_of_year = Column(String(255), nullable=False)
    year = Column("year_", SmallInteger, nullable=False)


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=False)
    street_name = Column(String(255), nullable=False)
    cross_street = Column(String(255), nullable=False)  # empty when not at an intersection
    full_location = Column(String(255), nullable=False)
    neighborhood = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)


class Description(Base):
    __tablename__ = "descriptions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    crash_configuration = Column(String(255), nullable=False)
    total_crashes = Column(Integer, nullable=False)
    total_victims = Column(Integer, nullable=False)


FACET_MODELS = {
    "locations": Location,
    "times": Time,
    "tags": Tag,
    "descriptions": Description,
}
