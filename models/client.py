"""
Client schemas for validation and serialization.

Clients are companies (PJ, identified by CNPJ) or individuals
(PF, identified by CPF). Contacts are stored inline as JSON.
"""

from enum import Enum
from pydantic import Field, field_validator
from typing import Any, Optional

from models.base import BaseSchema, TimestampMixin


class PersonType(str, Enum):
    """Legal person type."""
    PJ = "PJ"  # Pessoa jurídica
    PF = "PF"  # Pessoa física


class ClientContact(BaseSchema):
    """A person to talk to at the client."""

    id: Optional[str] = Field(None, description="Generated when missing")
    name: Optional[str] = Field(None, max_length=120)
    role: str = Field(default="", max_length=80)
    phone: Optional[str] = Field(None, max_length=40)
    email: str = Field(default="", max_length=160)


class ClientFields(BaseSchema):
    """Optional client fields shared by create and update."""

    email: Optional[str] = Field(None, max_length=160)
    state_registration: Optional[str] = Field(
        None,
        max_length=40,
        description="Inscrição Estadual (PJ) or RG (PF)"
    )
    segment: Optional[str] = Field(None, max_length=80)
    additional_info: Optional[str] = Field(None, max_length=2000)

    zip_code: Optional[str] = Field(None, max_length=12)
    address: Optional[str] = Field(None, max_length=200)
    address_number: Optional[str] = Field(None, max_length=20)
    complement: Optional[str] = Field(None, max_length=100)
    neighborhood: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)


class ClientCreate(ClientFields):
    """
    Create a new client.

    Required: document, business_name, name, phone
    """

    person_type: PersonType = Field(default=PersonType.PJ)
    document: str = Field(..., min_length=1, max_length=20, description="CNPJ or CPF")
    business_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Razão social, or full name for PF"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Trade name, or nickname for PF"
    )
    phone: str = Field(..., min_length=1, max_length=40)
    tax_exception: bool = Field(default=False)
    contacts: list[ClientContact] = Field(default_factory=list)


class ClientUpdate(ClientFields):
    """
    Update existing client.

    All fields optional - only provided fields are updated.
    """

    person_type: Optional[PersonType] = None
    document: Optional[str] = Field(None, min_length=1, max_length=20)
    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, min_length=1, max_length=40)
    tax_exception: Optional[bool] = None
    contacts: Optional[list[ClientContact]] = None


class ClientResponse(ClientFields, TimestampMixin):
    """Client with all fields."""

    id: str
    person_type: PersonType = PersonType.PJ
    document: str
    business_name: str
    name: str
    phone: str = ""
    tax_exception: bool = False
    contacts: list[ClientContact] = Field(default_factory=list)

    @field_validator("contacts", mode="before")
    @classmethod
    def contacts_default(cls, v: Any) -> Any:
        return v or []

    @field_validator("phone", mode="before")
    @classmethod
    def phone_default(cls, v: Any) -> Any:
        return v or ""

    @field_validator("tax_exception", mode="before")
    @classmethod
    def tax_exception_default(cls, v: Any) -> Any:
        return bool(v)


class ClientListResponse(BaseSchema):
    """List of clients with pagination."""

    data: list[ClientResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
