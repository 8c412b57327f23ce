"""
Pydantic models for API requests and responses.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QueryRequest(BaseModel):
    """User request model."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"question": "How do I create a basic plugin?"}
        }
    )

    question: str = Field(..., max_length=2000, description="User question (max 2000 characters)")


class QueryResponse(BaseModel):
    """RAG system response model."""

    answer: str


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str
    detail: Optional[str] = None
