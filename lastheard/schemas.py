"""
Pydantic schemas for request/response validation with OpenAPI documentation.
"""
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# Aggregation Schemas
# ============================================================================

class TalkgroupActivity(BaseModel):
    """Calls on one talkgroup within the time window."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "destinationId": 214,
                "destinationName": "Spain",
                "count": 42,
                "totalDuration": 1260,
            }
        }
    )

    destinationId: int = Field(..., description="Talkgroup id")
    destinationName: Optional[str] = Field(None, description="Talkgroup name as reported by the network")
    count: int = Field(..., description="Number of calls")
    totalDuration: int = Field(..., description="Summed call duration in seconds")


class CallsignActivity(BaseModel):
    """Calls made by one callsign within the time window."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "callsign": "EA7KLK",
                "name": "Juan",
                "count": 12,
                "totalDuration": 480,
            }
        }
    )

    callsign: str = Field(..., description="Source callsign")
    name: Optional[str] = Field(None, description="Operator name")
    count: int = Field(..., description="Number of calls")
    totalDuration: int = Field(..., description="Summed call duration in seconds")


# ============================================================================
# Call Record Schemas
# ============================================================================

class CallRecordOut(BaseModel):
    """A stored call record, using the stored column names."""
    id: int
    SourceID: int = Field(..., description="DMR id of the calling radio")
    DestinationID: int = Field(..., description="Talkgroup id")
    SourceCall: str = Field(..., description="Source callsign")
    SourceName: Optional[str] = Field(None, description="Operator name")
    DestinationCall: Optional[str] = None
    DestinationName: str = Field(..., description="Talkgroup name")
    Start: int = Field(..., description="Call start, unix seconds")
    Stop: int = Field(..., description="Call end, unix seconds")
    TalkerAlias: Optional[str] = None
    duration: int = Field(..., description="Call length in seconds")
    created_at: Optional[int] = None


class LastheardStats(BaseModel):
    """Totals across the call record store."""
    totalEntries: int = 0
    last24Hours: int = 0
    uniqueCallsigns: int = 0
    uniqueTalkgroups: int = 0


# ============================================================================
# Talkgroup Directory Schemas
# ============================================================================

class CountryOption(BaseModel):
    label: str = Field(..., description="Country display name", examples=["Spain"])
    value: str = Field(..., description="Country code", examples=["ES"])


class TalkgroupOption(BaseModel):
    talkgroup_id: int
    name: str


class TalkgroupOut(BaseModel):
    """Talkgroup directory entry."""
    model_config = ConfigDict(from_attributes=True)

    talkgroup_id: int
    name: str
    country: Optional[str] = None
    continent: Optional[str] = None
    full_country_name: Optional[str] = None
    last_updated: Optional[int] = None


# ============================================================================
# User Schemas
# ============================================================================

class LoginRequest(BaseModel):
    callsign: str = Field(..., min_length=1, description="Callsign used at registration")
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    callsign: str
    name: Optional[str] = None
    email: str
    is_admin: bool = False
    last_login_at: Optional[int] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


# ============================================================================
# System Schemas
# ============================================================================

class HealthResponse(BaseModel):
    status: str = Field(..., description="healthy or degraded")
    timestamp: str
    services: dict
