"""Email digest delivery over SMTP."""

import asyncio
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader

from ..models import CuratedItem
from ..config import SMTPConfig
from ..logger import get_logger
from .base import Notifier, group_by_category


TEMPLATE_DIR = Path(__file__).parent / "templates"


class EmailNotifier(Notifier):
    """Renders the digest with Jinja2 and sends it via SMTP."""

    name = "email"

    def __init__(
        self,
        config: SMTPConfig,
        categories: Optional[Dict[str, str]] = None,
        template_dir: Path = TEMPLATE_DIR,
        max_retries: int = 2,
        retry_delay: float = 30.0
    ):
        """
        Initialize email notifier.

        Args:
            config: SMTP server configuration
            categories: Category -> display label
            template_dir: Directory containing digest.html and digest.txt
            max_retries: Send attempts for transient SMTP failures
            retry_delay: Seconds to wait between attempts
        """
        self.config = config
        self.categories = categories or {}
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.logger = get_logger()

        self.env = Environment(loader=FileSystemLoader(str(template_dir)), autoescape=True)
        self.html_template = self.env.get_template("digest.html")
        self.text_template = Environment(
            loader=FileSystemLoader(str(template_dir)), autoescape=False
        ).get_template("digest.txt")

    def compose(self, items: List[CuratedItem], date: Optional[datetime] = None) -> Tuple[str, str, str]:
        """
        Render the digest.

        Returns:
            Tuple of (subject, html_body, plain_text_body)
        """
        date = date or datetime.now()
        context = {
            'date': date.strftime('%B %d, %Y'),
            'timestamp': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            'total_count': len(items),
            'groups': [
                (self.categories.get(category, category), group)
                for category, group in group_by_category(items).items()
            ],
        }
        subject = f"Tech Digest - {context['date']} ({len(items)} items)"
        return subject, self.html_template.render(**context), self.text_template.render(**context)

    async def deliver(self, items: List[CuratedItem]) -> bool:
        if not items:
            self.logger.info("No items to send")
            return True

        subject, html_body, text_body = self.compose(items)
        message = self._create_message(subject, html_body, text_body)

        for attempt in range(self.max_retries):
            try:
                await asyncio.to_thread(self._send, message)
                self.logger.info(f"Email with {len(items)} items sent to {self.config.recipient_email}")
                return True
            except smtplib.SMTPAuthenticationError as e:
                self.logger.error(f"SMTP authentication failed: {e}")
                return False
            except (smtplib.SMTPException, OSError) as e:
                self.logger.warning(f"SMTP error on attempt {attempt + 1}/{self.max_retries}: {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay)

        self.logger.error(f"Failed to send email after {self.max_retries} attempts")
        return False

    def _send(self, message: MIMEMultipart) -> None:
        if self.config.use_tls:
            # STARTTLS on port 587
            server = smtplib.SMTP(self.config.host, self.config.port, timeout=30)
            server.starttls()
        else:
            # SSL on port 465
            server = smtplib.SMTP_SSL(self.config.host, self.config.port, timeout=30)

        try:
            server.login(self.config.username, self.config.password)
            server.send_message(message)
        finally:
            try:
                server.quit()
            except smtplib.SMTPException:
                pass  # server may already have closed the connection

    def _create_message(self, subject: str, html_body: str, text_body: str) -> MIMEMultipart:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = self.config.from_email
        msg['To'] = self.config.recipient_email

        msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        # HTML last so clients prefer it
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))
        return msg
