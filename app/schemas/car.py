"""Car-related Pydantic schemas."""

from decimal import Decimal

from pydantic import Field, field_serializer

from app.schemas.common import CamelModel


class CarBase(CamelModel):
    """Base car schema."""

    make: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    year: int = Field(..., ge=1900, le=2100)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)  # per day
    location: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = None
    features: list[str] = Field(default_factory=list)


class CarCreate(CarBase):
    """Schema for listing a car. The owner is always the caller."""

    availability: bool = True


class CarUpdate(CamelModel):
    """Schema for updating a car. Only supplied fields change."""

    make: str | None = Field(None, min_length=1, max_length=50)
    model: str | None = Field(None, min_length=1, max_length=50)
    year: int | None = Field(None, ge=1900, le=2100)
    price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    location: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = None
    features: list[str] | None = None
    availability: bool | None = None


class CarResponse(CamelModel):
    """Schema for car response."""

    id: str
    host_id: str
    make: str
    model: str
    year: int
    price: Decimal
    location: str
    description: str | None
    image_url: str | None
    features: list[str]
    availability: bool

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class CarSummary(CamelModel):
    """Car details shown alongside a renter's booking."""

    make: str
    model: str
    image_url: str | None
