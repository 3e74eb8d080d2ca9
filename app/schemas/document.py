from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from app.models.enums import DocumentStatus, DocumentType


# ---------------------------------------------------------------------
# PER-TYPE DETAILS (tagged on document_type)
# ---------------------------------------------------------------------
class AadhaarDetails(BaseModel):
    document_type: Literal["aadhaar"]
    full_name: str
    number: str = Field(pattern=r"^[0-9]{12}$")


class PanDetails(BaseModel):
    document_type: Literal["pan"]
    full_name: str
    number: str = Field(pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]$")


class PassportDetails(BaseModel):
    document_type: Literal["passport"]
    full_name: str
    number: str = Field(pattern=r"^[A-Z][0-9]{7}$")
    nationality: str
    expiry_date: date


class DrivingLicenseDetails(BaseModel):
    document_type: Literal["driving_license"]
    full_name: str
    number: str = Field(min_length=8, max_length=20)
    expiry_date: date


class VoterIdDetails(BaseModel):
    document_type: Literal["voter_id"]
    full_name: str
    number: str = Field(pattern=r"^[A-Z]{3}[0-9]{7}$")


DocumentDetails = Annotated[
    Union[AadhaarDetails, PanDetails, PassportDetails, DrivingLicenseDetails, VoterIdDetails],
    Field(discriminator="document_type"),
]

document_details_adapter = TypeAdapter(DocumentDetails)


class DocumentOut(BaseModel):
    id: int
    user_id: int
    booking_id: Optional[int] = None
    document_type: DocumentType
    details: DocumentDetails
    image_url: Optional[str] = None
    status: DocumentStatus
    review_message: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DocumentReview(BaseModel):
    status: Literal["approved", "rejected"]
    review_message: Optional[str] = None
