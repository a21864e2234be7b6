"""
Analytics models - daily counters and the item view event log
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from menuisland.database import Base


class AnalyticsDay(Base):
    """Visits and QR scans per restaurant per calendar day"""
    __tablename__ = "analytics_days"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    visits = Column(Integer, nullable=False, default=0)
    qr_scans = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "date", name="uq_analytics_restaurant_date"),
    )


class MenuItemViewEvent(Base):
    """Append-only log of menu item views; ranked by query, never collapsed"""
    __tablename__ = "menu_item_view_events"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_id = Column(Integer, nullable=False, index=True)  # no FK: the log outlives deleted dishes
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    viewer_language = Column(String(8), nullable=True)
    user_agent = Column(String(512), nullable=True)
    ip_address = Column(String(45), nullable=True)  # truncated (/24 or /48)
    viewed_at = Column(DateTime, nullable=False, default=datetime.now, index=True)  # restaurant-local wall clock


class LanguageUsageDay(Base):
    """Menu views per language per restaurant per calendar day"""
    __tablename__ = "language_usage_days"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    language = Column(String(8), nullable=False)
    date = Column(Date, nullable=False, index=True)
    view_count = Column(Integer, nullable=False, default=0)
    last_used = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "language", "date", name="uq_language_usage_restaurant_lang_date"),
    )
