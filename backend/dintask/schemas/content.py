"""Landing page CMS schemas"""
from pydantic import Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

from dintask.schemas.base import CamelModel, PartialUpdate


LandingSection = Literal["hero", "features", "strategic_options", "tactical_preview", "platform", "faqs"]


class LandingPageOut(CamelModel):
    id: str
    hero: Dict[str, Any] = {}
    features: Dict[str, Any] = {}
    strategic_options: Dict[str, Any] = {}
    tactical_preview: Dict[str, Any] = {}
    platform: Dict[str, Any] = {}
    faqs: Dict[str, Any] = {}
    updated_at: Optional[datetime] = None


class LandingPageUpdate(CamelModel):
    section: str
    data: Dict[str, Any]


class TestimonialOut(CamelModel):
    id: str
    name: str
    role: str
    image: Optional[str] = ""
    rating: int
    testimonial: str
    is_approved: bool
    highlighted: bool
    created_at: Optional[datetime] = None


class TestimonialCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, max_length=255)
    image: str = ""
    rating: int = Field(default=5, ge=1, le=5)
    testimonial: str = Field(..., min_length=1, max_length=500)


class TestimonialStatusUpdate(CamelModel):
    is_approved: bool


class SystemIntelOut(CamelModel):
    id: str
    role: str
    title: str
    process: str
    flow: List[str] = []
    features: List[str] = []
    icon: Optional[str] = ""
    last_updated: Optional[datetime] = None


class SystemIntelUpsert(CamelModel):
    title: str = Field(..., min_length=1)
    process: str = Field(..., min_length=1)
    flow: List[str] = Field(..., min_length=1)
    features: List[str] = Field(..., min_length=1)
    icon: str = ""


class TacticalModuleOut(CamelModel):
    id: str
    module_id: str
    title: str
    description: str
    icon: str
    image: str
    theme_color: Optional[str] = None
    target_audience: str
    detailed_features: List[str] = []
    tags: List[str] = []


ThemeColor = Literal["blue", "purple", "amber", "emerald", "yellow", "orange", "red", "green", "indigo", "pink"]


class TacticalModuleUpdate(PartialUpdate):
    title: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    image: Optional[str] = None
    theme_color: Optional[ThemeColor] = None
    target_audience: Optional[str] = None
    detailed_features: Optional[List[str]] = None
    tags: Optional[List[str]] = None
