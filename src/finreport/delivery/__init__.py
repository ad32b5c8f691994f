"""Report delivery: PDF rendering, email bodies and SMTP sending."""

from finreport.delivery.pdf import PdfRenderer
from finreport.delivery.mailer import Attachment, MailSender, SendResult, create_mail_sender

__all__ = ["PdfRenderer", "Attachment", "MailSender", "SendResult", "create_mail_sender"]
