import logging
from typing import Any

import boto3
from jinja2 import Template

from .base import EmailService
from .config import SESConfig

logger = logging.getLogger(__name__)


class SESService(EmailService):
    """AWS SES email service. Events carry jinja2 ``subject`` and ``template`` strings."""

    def __init__(self):
        pass

    def __call__(self, config: SESConfig, *args, **kwargs):
        super().__call__(config)

        self.client = boto3.client('ses', region_name=self.config.AWS_REGION)

        return self

    def send_email(self, message: dict) -> Any:
        event_name = message.get('event')
        event_data = message.get('data') or {}
        to_addresses = message.get('to_emails') or []

        event_mapping = self.config.get_event(event_name)
        parameters = {**event_mapping.get('default_parameters', {}), **event_data}
        subject = Template(event_mapping.get('subject', '')).render(**parameters)
        body = Template(event_mapping.get('template', '')).render(**parameters)

        response = self.client.send_email(
            Source=self.config.SOURCE_EMAIL,
            Destination={'ToAddresses': list(to_addresses)},
            Message={
                'Subject': {'Data': subject, 'Charset': 'UTF-8'},
                'Body': {'Text': {'Data': body, 'Charset': 'UTF-8'}},
            }
        )
        logger.info("SES accepted %s message. MessageId: %s", event_name, response.get('MessageId'))
        return response
