from __future__ import annotations

from src.notify.layout import Action, EmailBody, Product, render_html, render_text
from src.ports.mailer import OutboundEmail
from src.utils.settings import MailSettings

WELCOME_SUBJECT = "Welcome to TradeSignal"
SIGNAL_SUBJECT = "New Signal from TradeSignal"


def _product(mail: MailSettings) -> Product:
    return Product(name=mail.product_name, link=mail.product_link)


def welcome_email(mail: MailSettings, to_email: str, user_name: str, confirm_url: str) -> OutboundEmail:
    product = _product(mail)
    body = EmailBody(
        name=user_name,
        intros=[f"Welcome to {product.name}! We're very excited to have you on board."],
        action=Action(
            instructions=f"To get started with {product.name}, please confirm your email address:",
            button_text="Confirm your account",
            link=confirm_url,
        ),
        outros=["Need help, or have questions? Just reply to this email, we'd love to help."],
    )
    return OutboundEmail(
        sender_name=mail.sender_name,
        sender_email=mail.sender_email,
        recipient_name=user_name,
        recipient_email=to_email,
        subject=WELCOME_SUBJECT,
        template_id=mail.mailersend.welcome_template_id,
        variables={"name": user_name, "confirm_url": confirm_url},
        html=render_html(product, body, title=WELCOME_SUBJECT),
        text=render_text(product, body),
    )


def signal_email(
    mail: MailSettings,
    to_email: str,
    user_name: str,
    symbol: str,
    event_time: str,
    signal: str,
    strategy: str,
) -> OutboundEmail:
    product = _product(mail)
    body = EmailBody(
        name=user_name,
        intros=[f"Your {strategy} strategy produced a new {signal} signal for {symbol}."],
        table=[("Symbol", symbol), ("Time", event_time), ("Signal", signal), ("Strategy", strategy)],
        outros=["Signals are informational only and are not investment advice."],
    )
    return OutboundEmail(
        sender_name=mail.sender_name,
        sender_email=mail.sender_email,
        recipient_name=user_name,
        recipient_email=to_email,
        subject=SIGNAL_SUBJECT,
        template_id=mail.mailersend.signal_template_id,
        variables={"symbol": symbol, "time": event_time, "signal": signal, "strategy": strategy},
        html=render_html(product, body, title=SIGNAL_SUBJECT),
        text=render_text(product, body),
    )
