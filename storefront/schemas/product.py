from pydantic import BaseModel
from typing import Any, Dict, List, Optional

class ProductColor(BaseModel):
    name: str
    value: str

# 👇 Catalog entry as the backend returns it
class ProductData(BaseModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    price: float
    original_price: Optional[float] = None
    category: str
    model: str = ""
    specifications: Optional[Dict[str, Any]] = None
    ideal_for: Optional[List[str]] = None
    colors: Optional[List[ProductColor]] = None
    in_stock: bool = True
    featured: bool = False
    images: Optional[List[str]] = None

    class Config:
        extra = "allow"

# 👇 Query filters for the catalog listing
class ProductFilters(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        params = {}
        for key, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            elif value != "":
                params[key] = str(value)
        return params
