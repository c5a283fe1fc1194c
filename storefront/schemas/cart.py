from pydantic import BaseModel, Field
from typing import Any, List, Optional, Union

class CartProduct(BaseModel):
    name: Optional[str] = None
    price: float = 0.0
    image_url: Optional[str] = None
    images: List[Optional[str]] = Field(default_factory=list)
    model: str = "Standard Model"
    category: str = "Electric Vehicle"
    description: Optional[str] = None

class CartItem(BaseModel):
    id: Union[int, str]
    product_id: int
    quantity: int
    color: Optional[str] = None
    name: Optional[str] = None
    price: float = 0.0
    image_url: Optional[str] = None
    total: float = 0.0
    product: CartProduct = Field(default_factory=CartProduct)

    class Config:
        extra = "allow"

class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = 1
    color: Optional[str] = None

class CartQuantityUpdate(BaseModel):
    quantity: int

class ApiEnvelope(BaseModel):
    """Response wrapper every backend endpoint uses"""
    success: bool = False
    message: Optional[str] = None
    data: Any = None
    deleted_items: Optional[int] = None

    class Config:
        extra = "allow"

class CartSummary(BaseModel):
    item_count: int
    subtotal: float
    shipping: float
    total: float
