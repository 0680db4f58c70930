from pydantic import BaseModel, Field
from datetime import datetime


class AppointmentCreate(BaseModel):
    doctor_name: str = Field(..., min_length=1, max_length=200, alias="doctorName")
    slot: str = Field(..., min_length=1, max_length=100)

    model_config = {
        'populate_by_name': True
    }


class AppointmentOut(BaseModel):
    id: str
    doctor_name: str
    slot: str
    timestamp: datetime

    model_config = {
        'from_attributes': True
    }
