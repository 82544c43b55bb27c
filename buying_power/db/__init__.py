# This project was developed with assistance from AI tools.
from .database import Base, SessionLocal, engine, get_db
from .models import CountyPropertyData, DailyMortgageRate

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    # Models
    "CountyPropertyData",
    "DailyMortgageRate",
]
