"""
Database Schemas

Pydantic models for the MongoDB collections used by the listing service.
Model name is converted to lowercase for the collection name:
- Property -> "property" collection
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from config import DEFAULT_COUNTRY

PROPERTY_TYPES = ("Apartment", "House", "Villa", "Land", "Commercial", "Other")
LISTING_STATUSES = ("For Sale", "For Rent", "Sold", "Rented", "Pending")

PropertyType = Literal["Apartment", "House", "Villa", "Land", "Commercial", "Other"]
ListingStatus = Literal["For Sale", "For Rent", "Sold", "Rented", "Pending"]


class Location(BaseModel):
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zipCode: str = Field(..., min_length=1)
    country: str = DEFAULT_COUNTRY


class Agent(BaseModel):
    """Listing agent contact"""
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"\S+@\S+\.\S+")
    phone: str = Field(..., min_length=1)


class Property(BaseModel):
    """
    Validated real estate listing
    Collection name: "property"
    """
    propertyType: PropertyType = Field(..., description="Kind of property")
    location: Location
    price: float = Field(..., gt=0, description="Absolute price (INR)")
    area: float = Field(..., gt=0, description="Area in sq ft")
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list, description="Amenities")
    agent: Agent
    status: ListingStatus = Field("For Sale", description="Market status")
    photos: List[str] = Field(default_factory=list, description="Public photo paths")
