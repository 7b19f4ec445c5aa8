from .config import Config, MailjetConfig, SESConfig, EmailConfig
from .base import EmailService
from .mailjet import MailjetService
from .ses import SESService
from .factory import email_factory
from .enums import EmailProvider


__all__ = [
    'Config',
    'MailjetConfig',
    'SESConfig',
    'EmailConfig',
    'EmailService',
    'MailjetService',
    'SESService',
    'email_factory',
    'EmailProvider'
]
