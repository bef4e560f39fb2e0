import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)

MEET_LINK_SUBJECT = "Google Meet Link for Your Session"


def send_meet_link(booking, meet_link):
    """Email the booking's user the link to their video session.

    Returns the recipient address. SMTP failures propagate to the caller.
    """
    recipient = booking.user.email
    send_mail(
        subject=MEET_LINK_SUBJECT,
        message=(
            "Hello, your therapist has scheduled a Google Meet session. "
            f"Join using this link: {meet_link}"
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient],
        fail_silently=False,
    )
    logger.info("Meet link for booking %s sent to %s", booking.pk, recipient)
    return recipient
