from pydantic import BaseModel
from typing import List


# Outcome of a CSV product import; rows are imported independently
class ImportResult(BaseModel):
    total_rows: int
    imported: int
    errors: List[str]
