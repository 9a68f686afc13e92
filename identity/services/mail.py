"""
Outbound e-mail over SMTP.

Messages are rendered from Jinja2 templates in ``templates/``. Each template
defines three blocks: ``subject``, ``plain_body`` and ``html_body``.
"""

import logging
import smtplib
import time
from email.message import EmailMessage
from typing import Mapping, NamedTuple, Optional

from jinja2 import Environment, PackageLoader, Template, select_autoescape

from .. import domain
from ..exceptions import MailDeliveryFailed


class MailSession(object):
    """An open session with an SMTP service."""

    def __init__(self, host: str, port: int, username: Optional[str] = None,
                 password: Optional[str] = None, use_tls: bool = False,
                 timeout: float = 10.0) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send_message(self, message: EmailMessage) -> None:
        """Open a connection, send ``message`` and hang up."""
        with smtplib.SMTP(host=self._host, port=self._port,
                          timeout=self._timeout) as conn:
            if self._use_tls:
                conn.starttls()
            if self._username:
                conn.login(self._username, self._password or '')
            conn.send_message(message)


class Mailer(object):
    """
    Renders and sends templated messages.

    A failed delivery is retried up to ``retries`` more times, ``retry_delay``
    seconds apart, before :class:`.MailDeliveryFailed` is raised.
    """

    def __init__(self, session: MailSession, sender: str, retries: int = 3,
                 retry_delay: float = 0.5,
                 logger: Optional[logging.Logger] = None) -> None:
        self._session = session
        self._sender = sender
        self._retries = retries
        self._retry_delay = retry_delay
        self._logger = logger or logging.getLogger(__name__)
        self._env = Environment(
            loader=PackageLoader('identity.services', 'templates'),
            autoescape=select_autoescape(['html', 'tmpl'])
        )

    def render(self, template_name: str, data: NamedTuple) -> EmailMessage:
        """Render ``template_name`` with ``data`` into a message."""
        template = self._env.get_template(template_name)
        context = domain.to_dict(data)
        message = EmailMessage()
        message['From'] = self._sender
        message['Subject'] = _render_block(template, 'subject', context)
        message.set_content(_render_block(template, 'plain_body', context))
        message.add_alternative(_render_block(template, 'html_body', context),
                                subtype='html')
        return message

    def send(self, recipient: str, template_name: str,
             data: NamedTuple) -> None:
        """
        Send ``template_name`` rendered with ``data`` to ``recipient``.

        Raises
        ------
        :class:`.MailDeliveryFailed`
            If every attempt failed.

        """
        message = self.render(template_name, data)
        message['To'] = recipient
        error: Optional[Exception] = None
        for attempt in range(self._retries + 1):
            try:
                self._session.send_message(message)
                return
            except (smtplib.SMTPException, OSError) as e:
                error = e
                self._logger.warning('Delivery to %s failed (attempt %i): %s',
                                     recipient, attempt + 1, e)
            if attempt < self._retries:
                time.sleep(self._retry_delay)
        raise MailDeliveryFailed(f'Could not deliver to {recipient}') \
            from error


def _render_block(template: Template, block: str, context: dict) -> str:
    render = template.blocks[block]
    return ''.join(render(template.new_context(context))).strip()


def get_mailer(config: Mapping,
               logger: Optional[logging.Logger] = None) -> Mailer:
    """Get a new :class:`.Mailer` using ``config``."""
    session = MailSession(
        host=config.get('SMTP_HOST', 'localhost'),
        port=int(config.get('SMTP_PORT', '25')),
        username=config.get('SMTP_USERNAME') or None,
        password=config.get('SMTP_PASSWORD') or None,
        use_tls=bool(int(config.get('SMTP_USE_TLS', '0'))),
    )
    return Mailer(
        session,
        sender=config.get('SMTP_SENDER', 'no-reply@localhost'),
        retries=int(config.get('MAIL_RETRIES', '3')),
        retry_delay=float(config.get('MAIL_RETRY_DELAY', '0.5')),
        logger=logger
    )
