from django import forms

from therapy_project.api import ApiModelForm

from .models import Booking, Diagnostic, Feedback, Resource, Therapist, TherapySession, User


class UserForm(ApiModelForm):
    class Meta:
        model = User
        fields = ['full_name', 'email', 'contact_phone', 'address', 'role']


class TherapistForm(ApiModelForm):
    class Meta:
        model = Therapist
        fields = ['user', 'full_name', 'specialization', 'experience_years', 'contact_phone', 'availability']


class TherapySessionForm(ApiModelForm):
    class Meta:
        model = TherapySession
        fields = ['user', 'therapist', 'session_date', 'session_notes']


class DiagnosticForm(ApiModelForm):
    class Meta:
        model = Diagnostic
        fields = ['user', 'diagnosis', 'recommendations']


class FeedbackForm(ApiModelForm):
    class Meta:
        model = Feedback
        fields = ['user', 'session', 'rating', 'comments']


class BookingForm(ApiModelForm):
    # HH:MM:SS, 24-hour clock
    session_time = forms.TimeField(input_formats=['%H:%M:%S'])

    class Meta:
        model = Booking
        fields = ['user', 'therapist', 'session_date', 'session_time', 'booking_status']


class ResourceForm(ApiModelForm):
    class Meta:
        model = Resource
        fields = ['title', 'content']


class MeetLinkForm(forms.Form):
    bookingId = forms.IntegerField(min_value=1)
    meetLink = forms.URLField(max_length=500, assume_scheme='https')
