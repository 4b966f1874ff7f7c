"""Pydantic models for National Assembly representatives."""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from .document import new_id

logger = logging.getLogger(__name__)


class RepresentativeContentType(str, Enum):
    PROFILE = "profile"
    BIO = "bio"
    CONTACT = "contact"
    ACTIVITIES = "activities"
    COMMITTEES = "committees"


class Representative(BaseModel):
    """An elected member of the National Assembly (MNA)."""

    id: str = Field(default_factory=new_id)
    name: str
    name_clean: str
    father_name: Optional[str] = None
    constituency: str
    constituency_code: str
    constituency_name: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    party: str
    oath_taking_date: Optional[date] = None
    phone: Optional[str] = None
    permanent_address: Optional[str] = None
    islamabad_address: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Mr. Example Member",
                "name_clean": "Example Member",
                "constituency": "NA-1 (Chitral)",
                "constituency_code": "NA-1",
                "constituency_name": "Chitral",
                "district": "Chitral",
                "province": "Khyber Pakhtunkhwa",
                "party": "IND",
            }
        }


class ScrapedRepresentative(BaseModel):
    """
    One entry of the scraped National Assembly member list.

    Keys are camelCase as written by the scraper; unknown keys (profile
    URLs, images, raw HTML) are ignored. The oath date is DD-MM-YYYY and an
    unparseable one is dropped with a warning.
    """

    name: str
    name_clean: str
    father_name: Optional[str] = None
    constituency: str
    constituency_code: str
    constituency_name: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    party: str
    oath_taking_date: Optional[date] = None
    phone: Optional[str] = None
    permanent_address: Optional[str] = None
    islamabad_address: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True

    @field_validator(
        "father_name", "constituency_name", "district", "province",
        "phone", "permanent_address", "islamabad_address",
        mode="before"
    )
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("oath_taking_date", mode="before")
    @classmethod
    def parse_oath_date(cls, v):
        if v is None or isinstance(v, date):
            return v
        text = str(v).strip()
        if not text:
            return None
        try:
            return datetime.strptime(text, "%d-%m-%Y").date()
        except ValueError:
            logger.warning(f"Invalid oath taking date {text!r}; storing none")
            return None

    def to_representative(self) -> Representative:
        return Representative(**self.model_dump())


class RepresentativeEmbeddingRecord(BaseModel):
    """Embedded text about a representative."""

    representative_id: str
    content: str
    embedding: List[float]
    content_type: RepresentativeContentType = RepresentativeContentType.PROFILE
    metadata: Dict[str, Any] = Field(default_factory=dict)


def create_profile_content(rep: Representative) -> str:
    """
    Format representative data into the text that gets embedded.

    This is what the model "reads" when answering questions about
    representatives. Optional lines are omitted when empty.
    """
    parts = [f"Representative: {rep.name}"]
    if rep.father_name:
        parts.append(f"Father: {rep.father_name}")

    parts.append(f"Constituency: {rep.constituency}")
    if rep.constituency_name:
        parts.append(f"Area: {rep.constituency_name}")
    if rep.district:
        parts.append(f"District: {rep.district}")
    if rep.province:
        parts.append(f"Province: {rep.province}")

    parts.append(f"Party: {rep.party}")
    if rep.oath_taking_date:
        parts.append(f"Oath Date: {rep.oath_taking_date.isoformat()}")

    if rep.phone:
        parts.append(f"Phone: {rep.phone}")
    if rep.permanent_address:
        parts.append(f"Permanent Address: {rep.permanent_address}")
    if rep.islamabad_address:
        parts.append(f"Islamabad Address: {rep.islamabad_address}")

    return "\n".join(parts)


def create_embedding_metadata(rep: Representative) -> Dict[str, Any]:
    """Metadata used to filter representative results after vector search."""
    return {
        "province": rep.province or None,
        "party": rep.party,
        "constituency": rep.constituency,
        "district": rep.district or None,
    }
