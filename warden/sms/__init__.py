from .config import Config, SMSConfig, TwilioConfig
from .base import SMSService
from .twilio import TwilioService
from .factory import sms_factory
from .enums import MessageType, SMSProvider


__all__ = [
    'Config',
    'SMSConfig',
    'TwilioConfig',
    'SMSService',
    'TwilioService',
    'sms_factory',
    'MessageType',
    'SMSProvider'
]
