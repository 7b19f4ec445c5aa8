from enum import Enum


class SMSProvider(str, Enum):
    TWILIO = 'twilio'

    def __str__(self):
        return str(self.value)


class MessageType(str, Enum):
    """Delivery type of an SMS event."""
    SMS = 'sms'
    WHATSAPP = 'whatsapp'

    def __str__(self):
        return str(self.value)
