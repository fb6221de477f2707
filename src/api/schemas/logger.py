"""
Logger schemas - level and category listings, recent log lines
"""

from pydantic import BaseModel, Field
from typing import List


class LogLevelResponse(BaseModel):
    levels: List[str] = Field(description="DEBUG, INFO, WARN, ERROR")


class LogCategoryResponse(BaseModel):
    categories: List[str] = Field(description="Category names, e.g. CASCADE, PLAYBACK, STATE")


class LogMessage(BaseModel):
    """One line kept by the broadcaster (same shape as a log:entry push)"""
    timestamp: str
    level: str
    category: str
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "timestamp": "10:30:45",
                "level": "WARN",
                "category": "CASCADE",
                "message": "Request rejected: PAGE_1 → OPEN"
            }
        }
