import logging
import smtplib

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from therapy_project.api import InvalidBody, ModelResource, form_errors, read_json

from .forms import (
    BookingForm,
    DiagnosticForm,
    FeedbackForm,
    MeetLinkForm,
    ResourceForm,
    TherapistForm,
    TherapySessionForm,
    UserForm,
)
from .models import Booking, Diagnostic, Feedback, Resource, Therapist, TherapySession, User
from .notifications import send_meet_link

logger = logging.getLogger(__name__)


class UserResource(ModelResource):
    model = User
    form_class = UserForm
    label = 'users'


class TherapistResource(ModelResource):
    model = Therapist
    form_class = TherapistForm
    label = 'therapists'


class TherapySessionResource(ModelResource):
    model = TherapySession
    form_class = TherapySessionForm
    label = 'sessions'


class DiagnosticResource(ModelResource):
    model = Diagnostic
    form_class = DiagnosticForm
    label = 'diagnostics'


class FeedbackResource(ModelResource):
    model = Feedback
    form_class = FeedbackForm
    label = 'feedback'


class BookingResource(ModelResource):
    model = Booking
    form_class = BookingForm
    label = 'bookings'


class ResourceResource(ModelResource):
    model = Resource
    form_class = ResourceForm
    label = 'resources'


@csrf_exempt
@require_POST
def meet_link(request):
    try:
        payload = read_json(request)
    except InvalidBody:
        return JsonResponse({"error": "Booking ID and Meet link are required"}, status=400)

    form = MeetLinkForm(payload)
    if not form.is_valid():
        return JsonResponse(
            {"error": "Booking ID and Meet link are required", "details": form_errors(form)},
            status=400,
        )

    booking = (
        Booking.objects.select_related('user')
        .filter(pk=form.cleaned_data['bookingId'])
        .first()
    )
    if booking is None:
        return JsonResponse({"error": "Booking not found"}, status=404)

    try:
        recipient = send_meet_link(booking, form.cleaned_data['meetLink'])
    except (smtplib.SMTPException, OSError):
        logger.exception("Email sending error for booking %s", booking.pk)
        return JsonResponse({"error": "Failed to send email. Please try again later."}, status=500)

    return JsonResponse({"success": f"Meet link sent to {recipient}"})
