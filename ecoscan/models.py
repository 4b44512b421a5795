from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

class Material(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    recyclable: bool
    percentage: float = Field(ge=0, le=100)

class DeviceMaterialsProfile(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recyclable: bool
    materials: Tuple[Material, ...]
    disposal_instructions: str = Field(alias="disposalInstructions")
    environmental_impact: str = Field(alias="environmentalImpact")

class RecyclabilityVerdict(BaseModel):
    # camelCase aliases keep the payload readable by the existing front-ends
    model_config = ConfigDict(populate_by_name=True)

    recyclable: bool
    confidence: float = Field(ge=0, le=1)
    materials: List[Material] = Field(min_length=1)
    disposal_instructions: str = Field(alias="disposalInstructions")
    environmental_impact: str = Field(alias="environmentalImpact")

class AnalyzeRequest(BaseModel):
    image: str
    device_type: Optional[str] = None
    device_name: Optional[str] = None

class ScanRecord(BaseModel):
    id: str
    device_name: str
    device_type: Optional[str] = None
    created_at: datetime
    result: RecyclabilityVerdict
