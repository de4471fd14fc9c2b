"""
Email utilities for delivering reports.
This module provides utilities for sending report emails using SMTP.
"""
import json
from html import escape
import smtplib
from datetime import datetime
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Optional, Sequence

from app.core.config import EmailSettings
from app.core.exceptions import DeliveryError
from app.core.logging import logger
from app.utils import make_json_serializable


class EmailDispatcher:
    """Sends report emails through the configured SMTP server."""

    def __init__(self, email_settings: EmailSettings, report_title: str = "Reportify Report"):
        self.settings = email_settings
        self.report_title = report_title

    def _new_message(self, recipient: str, subtype: str = "mixed") -> MIMEMultipart:
        message = MIMEMultipart(subtype)
        message["From"] = self.settings.sender
        message["To"] = recipient
        message["Subject"] = self.settings.subject
        return message

    def _send(self, message: MIMEMultipart) -> None:
        """Connect to the SMTP server and send ``message``."""
        try:
            with smtplib.SMTP(
                self.settings.smtp_host,
                self.settings.smtp_port,
                timeout=self.settings.timeout,
            ) as server:
                if self.settings.use_tls:
                    server.starttls()
                if self.settings.username and self.settings.password_str:
                    server.login(self.settings.username, self.settings.password_str)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send report email to {message['To']}: {e}")
            raise DeliveryError("Failed to send email", details=str(e)) from e

    def send_report_data(
        self,
        recipient: str,
        report_data: Sequence[Any],
        html_table: Optional[str] = None,
    ) -> None:
        """
        Send report data in the email body.

        Args:
            recipient: Recipient email address
            report_data: Records to include, dumped as pretty-printed JSON
            html_table: Optional rendered HTML table for the HTML part

        Raises:
            DeliveryError: If the SMTP server rejects the message
        """
        dump = json.dumps(make_json_serializable(list(report_data)), indent=2)

        message = self._new_message(recipient, subtype="alternative")
        message.attach(MIMEText(f"Report Data:\n{dump}", "plain"))

        table = html_table or f"<pre>{escape(dump)}</pre>"
        html = f"""
        <html>
        <body style="font-family: Arial, sans-serif;">
            <h2>{escape(self.report_title)}</h2>
            <p>Here is your scheduled report:</p>
            {table}
        </body>
        </html>
        """
        message.attach(MIMEText(html, "html"))

        self._send(message)
        logger.info(f"Report data email sent to {recipient} ({len(report_data)} records)")

    def send_report_attachment(
        self,
        recipient: str,
        content: bytes,
        filename: str,
        mime_subtype: str = "pdf",
        generated_at: Optional[datetime] = None,
    ) -> None:
        """
        Send a rendered report as an attachment.

        Args:
            recipient: Recipient email address
            content: Rendered artifact bytes
            filename: Attachment file name
            mime_subtype: Subtype of the ``application/*`` attachment
            generated_at: Generation time shown in the body

        Raises:
            DeliveryError: If the SMTP server rejects the message
        """
        generated_at = generated_at or datetime.now()

        message = self._new_message(recipient)
        html = f"""
        <html>
        <body style="font-family: Arial, sans-serif;">
            <h2>{escape(self.report_title)}</h2>
            <p>Your scheduled report is attached as a {mime_subtype.upper()} file.</p>
            <p><strong>Generated at:</strong> {generated_at:%Y-%m-%d %H:%M}</p>
            <hr>
            <p>This report was generated automatically. Do not reply to this email.</p>
        </body>
        </html>
        """
        message.attach(MIMEText(html, "html"))

        attachment = MIMEApplication(content, _subtype=mime_subtype)
        attachment.add_header("Content-Disposition", "attachment", filename=filename)
        message.attach(attachment)

        self._send(message)
        logger.info(f"Report attachment {filename} sent to {recipient}")
