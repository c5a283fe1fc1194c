from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import datetime
import enum

class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"

class PaymentMethod(str, enum.Enum):
    cod = "cod"
    card = "card"  # not accepted yet

class ShippingInfo(BaseModel):
    # Wire names are camelCase, declared order is the validation order
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    province: str = ""
    zip_code: str = Field("", alias="zipCode")

    class Config:
        populate_by_name = True

class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int
    price: float
    color: Optional[str] = None

class OrderCreate(BaseModel):
    items: List[OrderItemCreate]
    shipping_info: ShippingInfo
    payment_method: PaymentMethod = PaymentMethod.cod
    subtotal: float
    shipping_fee: float
    total: float

class OrderItemOut(BaseModel):
    id: Optional[int] = None
    product_id: Optional[int] = None
    quantity: int = 0
    price: float = 0.0
    color: Optional[str] = None
    product: Optional[dict] = None

    class Config:
        extra = "allow"

class OrderOut(BaseModel):
    id: Union[int, str]
    order_number: Optional[str] = None
    status: str = OrderStatus.pending.value
    total: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut] = Field(default_factory=list)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    payment_method: Optional[str] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[str] = None
    order_notes: Optional[str] = None
    admin_notes: Optional[str] = None

    class Config:
        extra = "allow"

class TrackingEvent(BaseModel):
    id: Optional[int] = None
    status: str
    description: Optional[str] = None
    location: Optional[str] = None
    timestamp: Optional[datetime] = None
    admin_notes: Optional[str] = None

class OrderStatusUpdate(BaseModel):
    status: OrderStatus
