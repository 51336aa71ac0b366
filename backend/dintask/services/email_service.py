"""
Email Service for DinTask
=========================
Transactional mail for the platform:
- Workspace invitations
- Password reset links
- Subscription expiry reminders and expiry notices

Delivers through SendGrid when an API key is configured, SMTP otherwise.
"""

import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import asyncio

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from dintask.core.config import settings
from dintask.core.logging_config import logger


SUBJECT_EXPIRING_SOON = "Subscription Expiring Soon - DinTask"
SUBJECT_EXPIRING_TOMORROW = "Subscription Expiring Tomorrow - DinTask"
SUBJECT_EXPIRED = "Subscription Expired - DinTask"


class EmailService:
    """Async email service using SMTP or SendGrid"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.frontend_url = settings.FRONTEND_URL
        self.sendgrid_api_key = settings.SENDGRID_API_KEY
        self.use_sendgrid = settings.USE_SENDGRID and bool(self.sendgrid_api_key)

    @property
    def is_configured(self) -> bool:
        if self.use_sendgrid:
            return True
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise (including when no
        transport is configured).
        """
        if not self.is_configured:
            logger.warning(f"[Email] Email service not configured, skipping: {subject}")
            return False

        if self.use_sendgrid:
            return await self._send_via_sendgrid(to_email, subject, html_content, text_content)
        return await self._send_via_smtp(to_email, subject, html_content, text_content)

    async def _send_via_sendgrid(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        try:
            message = Mail(
                from_email=Email(self.from_email, self.from_name),
                to_emails=To(to_email),
                subject=subject,
                html_content=Content("text/html", html_content)
            )
            if text_content:
                message.add_content(Content("text/plain", text_content))

            sg = SendGridAPIClient(self.sendgrid_api_key)
            # SendGrid SDK is synchronous
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, sg.send, message)

            if response.status_code in (200, 201, 202):
                logger.info(f"[Email/SendGrid] Sent to {to_email}: {subject}")
                return True
            logger.error(f"[Email/SendGrid] Failed with status {response.status_code}: {response.body}")
            return False

        except Exception as e:
            logger.error(f"[Email/SendGrid] Failed to send email to {to_email}: {e}")
            return False

    async def _send_via_smtp(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        try:
            message = MIMEMultipart("alternative")
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email
            message["Subject"] = subject
            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True
            )
            logger.info(f"[Email/SMTP] Sent to {to_email}: {subject}")
            return True

        except Exception as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False

    def _layout(self, heading: str, body_html: str, button_text: str = None, button_url: str = None) -> str:
        button = f'''
            <p style="text-align: center;">
                <a href="{button_url}" style="display: inline-block; background: #f59e0b; color: #111827; padding: 14px 28px; text-decoration: none; border-radius: 8px; font-weight: 600;">
                    {button_text}
                </a>
            </p>
        ''' if button_text and button_url else ''

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <style>
                body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
                .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
                .header {{ background: #111827; color: #fbbf24; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
                .content {{ background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px; }}
                .footer {{ text-align: center; margin-top: 30px; font-size: 12px; color: #6b7280; }}
            </style>
        </head>
        <body>
            <div class="container">
                <div class="header"><h1>{heading}</h1></div>
                <div class="content">
                    {body_html}
                    {button}
                </div>
                <div class="footer"><p>Team DinTask</p></div>
            </div>
        </body>
        </html>
        """

    async def send_invitation(self, to_email: str, company_name: str, role: str, invite_url: str) -> bool:
        subject = f"Invitation to join {company_name} on DinTask"
        text = (
            f"You have been invited to join {company_name} on DinTask as a {role}.\n\n"
            f"Please click on the link below to register:\n\n{invite_url}\n\n"
            "Regards,\nTeam DinTask"
        )
        html = self._layout(
            "You're invited",
            f"<p>You have been invited to join <strong>{company_name}</strong> on DinTask as a <strong>{role}</strong>.</p>",
            "Accept Invitation",
            invite_url,
        )
        return await self.send_email(to_email, subject, html, text)

    async def send_password_reset(self, to_email: str, name: str, reset_url: str) -> bool:
        subject = "Password Reset Token - DinTask"
        text = (
            f"Hi {name},\n\nYou are receiving this email because you (or someone else) requested "
            f"a password reset. Open the link below within 10 minutes:\n\n{reset_url}\n\n"
            "If you did not request this, you can ignore this email.\n\nRegards,\nTeam DinTask"
        )
        html = self._layout(
            "Reset your password",
            f"<p>Hi {name},</p><p>Use the button below within 10 minutes to choose a new password.</p>",
            "Reset Password",
            reset_url,
        )
        return await self.send_email(to_email, subject, html, text)

    async def send_subscription_expiring(self, to_email: str, name: str, company_name: str, days: int) -> bool:
        if days <= 1:
            subject = SUBJECT_EXPIRING_TOMORROW
            text = (
                f"Hi {name},\n\nYour subscription for {company_name} is expiring tomorrow. "
                "Please renew it now to avoid any disruption.\n\nRegards,\nTeam DinTask"
            )
        else:
            subject = SUBJECT_EXPIRING_SOON
            text = (
                f"Hi {name},\n\nYour subscription for {company_name} is expiring in {days} days. "
                "Please renew it to continue enjoying our services without interruption.\n\n"
                "Regards,\nTeam DinTask"
            )
        html = self._layout(
            "Subscription reminder",
            "".join(f"<p>{line}</p>" for line in text.split("\n\n")[:-1]),
            "Renew Plan",
            f"{self.frontend_url}/admin/subscription",
        )
        return await self.send_email(to_email, subject, html, text)

    async def send_subscription_expired(self, to_email: str, name: str, company_name: str) -> bool:
        text = (
            f"Hi {name},\n\nYour subscription for {company_name} has expired today. "
            "Your team access has been limited. Please renew your subscription to restore "
            "full access.\n\nRegards,\nTeam DinTask"
        )
        html = self._layout(
            "Subscription expired",
            "".join(f"<p>{line}</p>" for line in text.split("\n\n")[:-1]),
            "Renew Plan",
            f"{self.frontend_url}/admin/subscription",
        )
        return await self.send_email(to_email, SUBJECT_EXPIRED, html, text)


# Singleton instance
email_service = EmailService()
