"""Send the rendered report by email over SMTP."""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from pathlib import Path
from typing import Optional, Union

from ..config import EmailConfig
from ..errors import DeliveryError
from ..models import ReportResult
from .html import render_html
from .text import render_text

logger = logging.getLogger(__name__)


def build_message(config: EmailConfig, text: str, html: str) -> EmailMessage:
    """Create a multipart/alternative message with text and HTML bodies."""
    msg = EmailMessage()
    msg['Subject'] = config.subject
    msg['From'] = config.from_address
    msg['To'] = ', '.join(config.to)
    msg.set_content(text)
    msg.add_alternative(html, subtype='html')
    return msg


def send_email_report(config: EmailConfig, report: ReportResult,
                      template_path: Union[str, Path, None] = None) -> bool:
    """
    Render the report and send it.

    Args:
        config: SMTP settings and recipients
        report: Report to send
        template_path: Optional HTML template override

    Returns:
        True if the email was sent, False if sending was skipped

    Raises:
        TemplateError: if the HTML template cannot be used
        DeliveryError: if the SMTP exchange fails
    """
    if not config.enabled:
        logger.info("Email sending is disabled. Skipping...")
        return False

    if report.is_empty:
        logger.info("No content to send.")
        return False

    # render before connecting so template errors surface as themselves
    msg = build_message(config, render_text([report]), render_html([report], template_path))

    try:
        context = ssl.create_default_context()
        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=30) as server:
            server.starttls(context=context)
            server.login(config.user, config.password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("SMTP delivery failed: %s", e)
        raise DeliveryError(e) from e

    logger.info("Email sent successfully! Recipients: %s", ', '.join(config.to))
    return True
