"""Landing page CMS: page sections, testimonials, role intel and module cards"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, JSON
from datetime import datetime

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


DEFAULT_HERO = {
    "heroBadge": "YOUR COMPLETE CRM PLATFORM",
    "heroTitle": "Five powerful CRM modules to run your entire business.",
    "heroSubtitle": (
        "Access our Sales, Project Management, HR, Finance, and Client Portal modules, "
        "all integrated in one platform. Manage your entire business operations without "
        "switching between multiple tools."
    ),
    "heroCtaPrimary": "Get Started",
    "heroCtaSecondary": "View Modules",
}

DEFAULT_TACTICAL_PREVIEW = {
    "tacticalTitle": "The Tactical Interface.",
    "tacticalSubtitle": "Tactical Preview",
    "showcaseImages": [],
}


class LandingPageContent(Base):
    """Singleton row; each section is a free-form JSON document"""
    __tablename__ = "landing_page_content"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    hero = Column(JSON, default=lambda: dict(DEFAULT_HERO))
    features = Column(JSON, default=lambda: {"modules": []})
    strategic_options = Column(JSON, default=lambda: {"options": []})
    tactical_preview = Column(JSON, default=lambda: dict(DEFAULT_TACTICAL_PREVIEW))
    platform = Column(JSON, default=dict)
    faqs = Column(JSON, default=lambda: {"items": []})

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Testimonial(Base):
    __tablename__ = "testimonials"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    role = Column(String(255), nullable=False)  # role/company line
    image = Column(Text, default="")
    rating = Column(Integer, default=5, nullable=False)
    testimonial = Column(String(500), nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    highlighted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SystemIntel(Base):
    """Per-role capability description shown on the landing page"""
    __tablename__ = "system_intel"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    role = Column(String(20), unique=True, nullable=False)  # Admin, Manager, Sales, Employee, SuperAdmin
    title = Column(String(255), nullable=False)
    process = Column(Text, nullable=False)
    flow = Column(JSON, default=list)
    features = Column(JSON, default=list)
    icon = Column(String(100), default="")
    last_updated = Column(DateTime, default=datetime.utcnow)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TacticalModule(Base):
    __tablename__ = "tactical_modules"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    module_id = Column(String(20), unique=True, nullable=False)  # admin, manager, employee, sales
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String(100), default="Layout", nullable=False)
    image = Column(Text, nullable=False)
    theme_color = Column(String(20), default="blue")
    target_audience = Column(String(255), nullable=False)
    detailed_features = Column(JSON, default=list)
    tags = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
