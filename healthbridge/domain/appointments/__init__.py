# Appointments domain module
from healthbridge.domain.appointments.models import Appointment

__all__ = [
    "Appointment",
]
