# backend/schemas/serial.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from models.serial import SerialStatus


class SerialNumberOut(BaseModel):
    id: int
    product_id: int
    serial_number: str
    status: SerialStatus
    order_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Serial list for one product with the counters the stock banner needs
class SerialNumberList(BaseModel):
    items: List[SerialNumberOut]
    available_count: int
    product_stock: int


# Free text with serials separated by newline, comma or semicolon
class SerialBulkAdd(BaseModel):
    serials: str = Field(min_length=1)


# Serials to take out of stock, by id and/or pasted serial text
class SerialRemove(BaseModel):
    serial_ids: List[int] = []
    serials: Optional[str] = None


class SerialStatusUpdate(BaseModel):
    status: SerialStatus
    order_id: Optional[int] = None


class SerialHistoryOut(BaseModel):
    id: int
    status: str
    order_id: Optional[int] = None
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SerialChangeResult(BaseModel):
    count: int
    product_stock: int
    serials: List[SerialNumberOut]
