# Import models so Base.metadata knows every table
from app.models.user import User
from app.models.test_result import TestResult
from app.models.appointment import Appointment

__all__ = ["User", "TestResult", "Appointment"]
