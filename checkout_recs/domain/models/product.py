from pydantic import BaseModel, Field
from typing import Optional, Tuple

# Ordered product GIDs resolved from the trigger product's metafield.
RecommendationSet = Tuple[str, ...]

class CartLine(BaseModel):
    merchandise_id: str              # variant GID
    product_id: Optional[str] = None
    model_config = {"frozen": True}

class Money(BaseModel):
    amount: float
    currency_code: Optional[str] = None
    model_config = {"frozen": True}

class ProductRecord(BaseModel):
    id: str
    title: str
    image_url: Optional[str] = None
    variant_id: str                  # primary (first) variant
    variant_price: Money
    available_for_sale: bool = False

    model_config = {"frozen": True}  # immuable = safe

class DisplayRecord(BaseModel):
    product_id: str
    variant_id: str
    title: str
    formatted_price: str
    image_url: str
    adding: bool = False
    model_config = {"frozen": True}

class UINode(BaseModel):
    """
    One element of the render tree handed to the host presentation layer.
    `component` names a host primitive (BlockStack, Heading, Button, ...).
    """
    component: str
    props: dict = Field(default_factory=dict)
    children: list["UINode"] = Field(default_factory=list)
    text: Optional[str] = None
