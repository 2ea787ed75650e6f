from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

class BucketStats(BaseModel):
    count: int = 0
    percentage: float = 0.0 # two decimals, relative to total_characters

class LanguageAnalysisResult(BaseModel):
    total_characters: int # UTF-16 code units, not scalar values
    encoding: Optional[str] = None
    languages: Dict[str, BucketStats]
    categories: Dict[str, BucketStats]

    def classified_units(self) -> int:
        """Number of scalar values the classifier counted (sum over all 13 buckets)."""
        return sum(b.count for b in self.languages.values()) + sum(b.count for b in self.categories.values())

class AnalyzeLanguageRequest(BaseModel):
    text: str

class ToolCallRequest(BaseModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)

class ToolCallResponse(BaseModel):
    name: str
    result: Dict[str, Any]

class ToolInfo(BaseModel):
    name: str
    description: str
    inputSchema: Dict[str, Any]

class ErrorDetail(BaseModel):
    code: int
    message: str
    details: Optional[Any] = None

class HealthResponse(BaseModel):
    status: str
    version: str
    tools: List[str]
