from clinic.services.appointment import AppointmentService
from clinic.services.email import EmailService
from clinic.services.login import LoginService
from clinic.services.test_result import TestResultService

__all__ = ["AppointmentService", "EmailService", "LoginService", "TestResultService"]
