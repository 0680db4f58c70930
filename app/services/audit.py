"""Audit logging helper functions for key domain events.

Standard single-line logs so they are easy to index.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional, Any

_logger = logging.getLogger("app.audit")


def _emit(event: str, user_id: Optional[str] = None, **data: Any):
    payload = {"ts": datetime.utcnow().isoformat() + "Z", "event": event}
    if user_id:
        payload["user_id"] = user_id
    payload.update(data)
    parts = [f"{k}={repr(v)}" for k, v in payload.items()]
    _logger.info("AUDIT " + " ".join(parts))

# Public convenience wrappers

def log_result_submit(user_id: str, result_id: str, total: int, level: str):
    _emit("result.submit", user_id=user_id, result_id=result_id, total=total, level=level)

def log_result_view(user_id: str, result_id: str):
    _emit("result.view", user_id=user_id, result_id=result_id)

def log_analysis_cache_hit(user_id: Optional[str], result_id: str):
    _emit("analysis.cache_hit", user_id=user_id, result_id=result_id)

def log_analysis_generated(user_id: Optional[str], result_id: Optional[str], forced: bool, persisted: bool):
    _emit("analysis.generate", user_id=user_id, result_id=result_id, forced=forced, persisted=persisted)

def log_appointment_booked(user_id: str, appointment_id: str, doctor_name: str, slot: str):
    _emit("appointment.book", user_id=user_id, appointment_id=appointment_id, doctor_name=doctor_name, slot=slot)
