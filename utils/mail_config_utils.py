from fastapi_mail import ConnectionConfig
from typing import List, Optional
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def load_mail_config() -> Optional[ConnectionConfig]:
    """
    Build the SMTP connection settings from the environment.

    Returns None when the configuration is incomplete so the service can run
    without outgoing mail.
    """
    mail_username = os.getenv("MAIL_USERNAME")
    mail_password = os.getenv("MAIL_PASSWORD")
    mail_from = os.getenv("MAIL_FROM")
    mail_server = os.getenv("MAIL_SERVER")

    if not all([mail_username, mail_password, mail_from, mail_server]):
        logger.warning("Email configuration is incomplete - notifications are disabled")
        return None

    return ConnectionConfig(
        MAIL_USERNAME=mail_username,
        MAIL_PASSWORD=mail_password,
        MAIL_FROM=mail_from,
        MAIL_PORT=int(os.getenv("MAIL_PORT", "465")),
        MAIL_SERVER=mail_server,
        MAIL_STARTTLS=os.getenv("MAIL_STARTTLS", "false").lower() == "true",
        MAIL_SSL_TLS=os.getenv("MAIL_SSL_TLS", "true").lower() == "true",
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


def notification_recipients() -> List[str]:
    raw = os.getenv("NOTIFICATION_EMAILS", "")
    return [email.strip() for email in raw.split(",") if email.strip()]
