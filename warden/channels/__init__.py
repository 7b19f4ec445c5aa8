from .base import ChannelAdapter, OtpMessage
from .phone import PhoneChannel, SmsChannel, WhatsAppChannel
from .email import EmailChannel
