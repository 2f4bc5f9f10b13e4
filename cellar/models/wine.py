from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator


class WineColor(str, Enum):
    RED = "RED"
    WHITE = "WHITE"
    ROSE = "ROSE"
    SPARKLING = "SPARKLING"
    DESSERT = "DESSERT"
    FORTIFIED = "FORTIFIED"


MIN_VINTAGE = 1900


def _check_vintage(value: int | None) -> int | None:
    if value is None:
        return value
    if value > date.today().year:
        raise ValueError("Vintage cannot be in the future")
    return value


def _check_rating(value: float | None) -> float | None:
    if value is None:
        return value
    if abs(round(value * 10) - value * 10) > 1e-6:
        raise ValueError("Rating must be in 0.1 increments")
    return round(value, 1)


def _link_to_str(value: AnyHttpUrl | None) -> str | None:
    return str(value) if value is not None else None


class WineCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    vintage: int = Field(ge=MIN_VINTAGE)
    producer: str = Field(min_length=1, max_length=200)
    region: str | None = Field(default=None, max_length=200)
    country: str = Field(min_length=1, max_length=100)
    grape_variety: str | None = Field(default=None, max_length=200)
    blend_detail: str | None = Field(default=None, max_length=500)
    color: WineColor
    quantity: int = Field(default=1, ge=0)
    purchase_price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    purchase_date: datetime | None = None
    drink_by_date: datetime | None = None
    rating: float | None = Field(default=None, ge=1.0, le=5.0)
    notes: str | None = Field(default=None, max_length=2000)
    wine_link: AnyHttpUrl | None = None
    image_url: str | None = None
    favorite: bool = False

    @field_validator("vintage")
    @classmethod
    def vintage_not_future(cls, value):
        return _check_vintage(value)

    @field_validator("rating")
    @classmethod
    def rating_step(cls, value):
        return _check_rating(value)

    def to_record_fields(self) -> dict:
        fields = self.model_dump()
        fields["wine_link"] = _link_to_str(self.wine_link)
        return fields


class WineUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    vintage: int | None = Field(default=None, ge=MIN_VINTAGE)
    producer: str | None = Field(default=None, min_length=1, max_length=200)
    region: str | None = Field(default=None, max_length=200)
    country: str | None = Field(default=None, min_length=1, max_length=100)
    grape_variety: str | None = Field(default=None, max_length=200)
    blend_detail: str | None = Field(default=None, max_length=500)
    color: WineColor | None = None
    quantity: int | None = Field(default=None, ge=0)
    purchase_price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    purchase_date: datetime | None = None
    drink_by_date: datetime | None = None
    rating: float | None = Field(default=None, ge=1.0, le=5.0)
    notes: str | None = Field(default=None, max_length=2000)
    wine_link: AnyHttpUrl | None = None
    image_url: str | None = None
    favorite: bool | None = None

    @field_validator("vintage")
    @classmethod
    def vintage_not_future(cls, value):
        return _check_vintage(value)

    @field_validator("rating")
    @classmethod
    def rating_step(cls, value):
        return _check_rating(value)

    @field_validator("name", "vintage", "producer", "country", "color", "quantity", "favorite")
    @classmethod
    def required_not_null(cls, value):
        # These columns are required; an update may omit them but not null them.
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def to_record_fields(self) -> dict:
        fields = self.model_dump(exclude_unset=True)
        if "wine_link" in fields:
            fields["wine_link"] = _link_to_str(self.wine_link)
        return fields


class WineRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    vintage: int
    producer: str
    region: str | None = None
    country: str
    grape_variety: str | None = None
    blend_detail: str | None = None
    color: WineColor
    quantity: int
    purchase_price: Decimal | None = None
    purchase_date: datetime | None = None
    drink_by_date: datetime | None = None
    rating: float | None = None
    notes: str | None = None
    wine_link: str | None = None
    image_url: str | None = None
    favorite: bool
    created_at: datetime
    updated_at: datetime
