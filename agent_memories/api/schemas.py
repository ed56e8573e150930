"""
Input models for the memory repository's public operations.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any, Union


class CreateMemoryInput(BaseModel):
    content: str
    metadata: Dict[str, Any] = {}
    category: Optional[str] = None
    agent_id: Optional[str] = None
    importance: float = 1
    embedding: Optional[List[float]] = None  # honoured only when auto-embedding is off

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('content cannot be empty')
        return v

    @field_validator('importance')
    @classmethod
    def importance_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError('importance must be positive')
        return v


class UpdateMemoryInput(BaseModel):
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    category: Optional[str] = None
    agent_id: Optional[str] = None
    importance: Optional[float] = None

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError('content cannot be empty')
        return v

    @field_validator('importance')
    @classmethod
    def importance_must_be_positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError('importance must be positive')
        return v


class SearchMemoryInput(BaseModel):
    """Text or vector query with optional limit, threshold and attribute filters."""
    query: Union[str, List[float]]
    limit: Optional[int] = None
    threshold: Optional[float] = None
    agent_id: Optional[str] = None
    category: Optional[str] = None
    min_importance: Optional[float] = None

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError('query cannot be empty')
        if isinstance(v, list) and not v:
            raise ValueError('query vector cannot be empty')
        return v

    @field_validator('limit')
    @classmethod
    def limit_must_be_positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError('limit must be positive')
        return v

    @field_validator('threshold')
    @classmethod
    def threshold_must_be_a_probability(cls, v):
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError('threshold must be between 0 and 1')
        return v
