"""
Restaurant (tenant) and template models
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON, func
from sqlalchemy.orm import relationship
from menuisland.database import Base


class Template(Base):
    """Visual theme for the public menu"""
    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    css_styles = Column(Text, nullable=True)  # injected verbatim into the public view
    color_scheme = Column(JSON, nullable=True)  # {"primary": "#c0392b", ...}
    is_popular = Column(Boolean, default=False)
    is_new = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Restaurant(Base):
    """A tenant, served publicly at <subdomain>.<BASE_DOMAIN>"""
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    subdomain = Column(String, unique=True, nullable=False, index=True)  # lowercase [a-z0-9-]
    location = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    owner_id = Column(String, nullable=True, index=True)  # user id from the auth layer
    template_id = Column(Integer, nullable=True)
    category = Column(String, nullable=True)  # cuisine tag, e.g. "pizzeria"
    timezone = Column(String, nullable=True)  # IANA name; server-local day when empty
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    categories = relationship("Category", back_populates="restaurant")
