"""
Email service

Envoi des emails via SMTP (paramètres dans Settings).
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

from app.core.config import Settings

logger = logging.getLogger(__name__)


def send_email(
    settings: Settings,
    recipients: List[str],
    subject: str,
    html: str,
    text: Optional[str] = None,
) -> bool:
    """
    Envoie un email multipart (texte + HTML).

    Returns:
        True si envoyé, False si SMTP non configuré ou en échec
    """
    if not settings.SMTP_SERVER or not settings.SMTP_EMAIL:
        logger.warning(f"SMTP settings not configured. Email '{subject}' not sent.")
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_EMAIL
    msg["To"] = ", ".join(recipients)
    if text:
        msg.attach(MIMEText(text, "plain"))
    msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT) as server:
            server.starttls()
            if settings.SMTP_PASSWORD:
                server.login(settings.SMTP_EMAIL, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {recipients}: {e}")
        return False

    logger.info(f"Email sent to {recipients}")
    return True


def password_reset_code_template(project_name: str, recipient_name: str, code: str,
                                 expires_in_minutes: int) -> tuple:
    html = f"""
    <!DOCTYPE html>
    <html lang="en">
    <body style="font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; color: #111827;">
      <h2>Reset your password</h2>
      <p>Hi {recipient_name},</p>
      <p>We received a request to reset the password for your <strong>{project_name}</strong> account.
         Use the code below to continue.</p>
      <div style="font-size: 32px; font-weight: 700; letter-spacing: 8px; color: #4f46e5;">{code}</div>
      <p>This code expires in <strong>{expires_in_minutes} minutes</strong>.</p>
      <p style="color: #6b7280;">If you didn't request this, you can safely ignore this email.</p>
    </body>
    </html>
    """

    text = (
        f"Hi {recipient_name},\n\n"
        f"Your {project_name} password reset code is: {code}\n\n"
        f"This code expires in {expires_in_minutes} minutes.\n"
        "If you didn't request this, you can safely ignore this email.\n"
    )
    return html, text


def send_password_reset_code(settings: Settings, email: str, recipient_name: str, code: str) -> bool:
    html, text = password_reset_code_template(
        settings.PROJECT_NAME, recipient_name, code, settings.PASSWORD_RESET_EXPIRE_MIN
    )
    return send_email(
        settings,
        [email],
        f"Password Reset Code - {settings.PROJECT_NAME}",
        html,
        text,
    )
