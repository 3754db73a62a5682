from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

PROFILE_FIELDS: tuple[str, ...] = ("username", "email", "phone", "location")

EDITABLE_LISTING_FIELDS: tuple[str, ...] = (
    "brand",
    "model",
    "location",
    "price",
    "description",
    "color",
    "owners_count",
    "kilometres_run",
    "model_year",
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())


class UserProfile(_WireModel):
    username: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""

    @field_validator(*PROFILE_FIELDS, mode="before")
    @classmethod
    def _blank_when_missing(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class Buyer(_WireModel):
    user_id: str = Field(validation_alias=AliasChoices("userId", "user_id", "_id"), serialization_alias="userId")
    username: str = ""
    contact: str = ""
    location: str = ""

    @field_validator("user_id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("username", "contact", "location", mode="before")
    @classmethod
    def _blank_when_missing(cls, value: Any) -> Any:
        return "" if value is None else value


class Listing(_WireModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    brand: str = ""
    model: str = ""
    location: str = ""
    price: Optional[float] = None
    description: str = ""
    color: str = ""
    owners_count: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("ownersCount", "owners_count"),
        serialization_alias="ownersCount",
    )
    kilometres_run: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("kilometresRun", "kilometres_run"),
        serialization_alias="kilometresRun",
    )
    model_year: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("modelYear", "model_year"),
        serialization_alias="modelYear",
    )
    images: List[str] = Field(default_factory=list)
    sold: bool = False
    booked_buyers: List[Buyer] = Field(
        default_factory=list,
        validation_alias=AliasChoices("bookedBuyers", "booked_buyers"),
        serialization_alias="bookedBuyers",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("brand", "model", "location", "description", "color", mode="before")
    @classmethod
    def _blank_when_missing(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("images", "booked_buyers", mode="before")
    @classmethod
    def _empty_when_missing(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def title(self) -> str:
        return " ".join(part for part in (self.brand, self.model) if part) or self.id

    def buyer_ids(self) -> list[str]:
        return [buyer.user_id for buyer in self.booked_buyers]


class EditDraft(_WireModel):
    """Working copy of a listing's editable fields.

    Field changes go through ``model_copy(update=...)`` so form input is kept
    verbatim; the server is the only validator.
    """

    brand: Any = ""
    model: Any = ""
    location: Any = ""
    price: Any = None
    description: Any = ""
    color: Any = ""
    owners_count: Any = Field(default=None, serialization_alias="ownersCount")
    kilometres_run: Any = Field(default=None, serialization_alias="kilometresRun")
    model_year: Any = Field(default=None, serialization_alias="modelYear")

    @classmethod
    def from_listing(cls, listing: Listing) -> "EditDraft":
        return cls(**{name: getattr(listing, name) for name in EDITABLE_LISTING_FIELDS})

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class SessionData(BaseModel):
    access_token: str
    user_id: str | None = None
    role: str | None = None
    env_name: str | None = None
