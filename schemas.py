"""
Database Schemas for the Photo Editing Order Service

Each Pydantic model represents a collection in MongoDB (services, users,
orders) or a request body accepted by the API.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Complexity = Literal["basic", "medium", "complex", "superComplex"]
OrderStatus = Literal["pending", "processing", "completed"]
Role = Literal["customer", "editor", "admin"]

ORDER_STATUSES = ("pending", "processing", "completed")
STAFF_ROLES = ("editor", "admin")


class Service(BaseModel):
    id: int
    name: str = Field(..., description="Service name")
    description: str = Field("", description="What the service does")
    basic_price: float = Field(..., ge=0, description="Per-image price, basic images")
    medium_price: float = Field(..., ge=0, description="Per-image price, medium images")
    complex_price: float = Field(..., ge=0, description="Per-image price, complex images")
    super_complex_price: float = Field(..., ge=0, description="Per-image price, super complex images")


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    basic_price: Optional[float] = Field(None, ge=0)
    medium_price: Optional[float] = Field(None, ge=0)
    complex_price: Optional[float] = Field(None, ge=0)
    super_complex_price: Optional[float] = Field(None, ge=0)


class User(BaseModel):
    id: int
    username: str
    role: Role = "customer"


class UserInDB(User):
    password: str = Field(..., description="Salted password hash")


class Credentials(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class OrderFile(BaseModel):
    path: str = Field(..., min_length=1, description="Uploaded file name or external URL")
    image_count: int = Field(1, ge=1, description="Images contained in the file or link")


class OrderDraft(BaseModel):
    """Selections collected by the order wizard; nothing here is required yet."""

    service_id: int = 0
    complexity: str = ""
    order_name: str = ""
    files: List[OrderFile] = Field(default_factory=list)
    addons: List[str] = Field(default_factory=list)
    delivery_format: str = ""
    delivery_time: str = "48"
    instructions: str = ""


class OrderCreate(BaseModel):
    """Body of POST /api/orders. Server-assigned fields are ignored if sent."""

    service_id: int = Field(..., ge=1)
    complexity: Complexity
    order_name: str = Field(..., min_length=1)
    files: List[OrderFile] = Field(..., min_length=1)
    addons: List[str] = Field(default_factory=list)
    delivery_format: str = ""
    delivery_time: str = "48"
    instructions: Optional[str] = None
    total_price: Optional[float] = None

    @field_validator("addons")
    @classmethod
    def unique_addons(cls, v):
        return list(dict.fromkeys(v))


class Order(BaseModel):
    id: int
    customer_id: int
    service_id: int
    status: OrderStatus = "pending"
    complexity: Complexity
    order_name: str
    files: List[OrderFile]
    addons: List[str] = Field(default_factory=list)
    delivery_format: str = ""
    delivery_time: str
    instructions: Optional[str] = None
    total_price: float = Field(..., ge=0)
    created_at: datetime


class Quote(BaseModel):
    base_price: float
    delivery_adjustment: float
    total_images: int
    base_total: float
    adjustment_total: float
    total_price: float
