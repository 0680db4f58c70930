from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List
import logging
import uuid

from app.db import get_db
from app.models.appointment import Appointment
from app.models.user import User
from app.schemas.appointment import AppointmentCreate, AppointmentOut
from app.services.audit import log_appointment_booked
from app.services.auth import get_current_user

logger = logging.getLogger("app.appointments")
router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("", response_model=AppointmentOut, status_code=201)
def book_appointment(
    payload: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    appointment = Appointment(
        id=str(uuid.uuid4()),
        user_id=current_user.id,
        doctor_name=payload.doctor_name.strip(),
        slot=payload.slot.strip(),
    )
    db.add(appointment)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to book appointment for user={current_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to book appointment")
    db.refresh(appointment)
    log_appointment_booked(current_user.id, appointment.id, appointment.doctor_name, appointment.slot)
    return appointment


@router.get("", response_model=List[AppointmentOut])
def list_appointments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Appointment)
        .filter(Appointment.user_id == current_user.id)
        .order_by(Appointment.timestamp.desc())
        .all()
    )
