# This project was developed with assistance from AI tools.
"""
Rate and property reference tables.

``daily_mortgage_rates`` is written by a scheduled job (one row per day);
``county_property_data`` caches per-county property tax and insurance figures.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)

from .database import Base


class DailyMortgageRate(Base):
    """Daily snapshot of 30-year fixed conventional and FHA rates."""

    __tablename__ = "daily_mortgage_rates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rate_date = Column(Date, nullable=False, unique=True, index=True)
    conventional = Column(Numeric(5, 3), nullable=True)
    fha = Column(Numeric(5, 3), nullable=True)
    source = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<DailyMortgageRate(date={self.rate_date}, conv={self.conventional}, fha={self.fha})>"


class CountyPropertyData(Base):
    """Property tax rate and insurance premium for one county."""

    __tablename__ = "county_property_data"
    __table_args__ = (UniqueConstraint("state", "county", name="uq_county_property_state_county"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    state = Column(String(2), nullable=False)
    county = Column(String(100), nullable=False)
    property_tax_rate = Column(Float, nullable=True)
    insurance_annual_premium = Column(Float, nullable=True)
    last_fetched = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<CountyPropertyData({self.county}, {self.state})>"
