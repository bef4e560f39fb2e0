from django.urls import path

from . import views

urlpatterns = [
    path('users', views.UserResource.as_view(), name='users'),
    path('users/<int:pk>', views.UserResource.as_view(), name='user_detail'),
    path('therapists', views.TherapistResource.as_view(), name='therapists'),
    path('therapists/<int:pk>', views.TherapistResource.as_view(), name='therapist_detail'),
    path('session', views.TherapySessionResource.as_view(), name='sessions'),
    path('session/<int:pk>', views.TherapySessionResource.as_view(), name='session_detail'),
    path('diagnostics', views.DiagnosticResource.as_view(), name='diagnostics'),
    path('diagnostics/<int:pk>', views.DiagnosticResource.as_view(), name='diagnostic_detail'),
    path('feedback', views.FeedbackResource.as_view(), name='feedback'),
    path('feedback/<int:pk>', views.FeedbackResource.as_view(), name='feedback_detail'),
    path('bookings', views.BookingResource.as_view(), name='bookings'),
    path('bookings/<int:pk>', views.BookingResource.as_view(), name='booking_detail'),
    path('resources', views.ResourceResource.as_view(), name='resources'),
    path('resources/<int:pk>', views.ResourceResource.as_view(), name='resource_detail'),
    path('send-meet-link', views.meet_link, name='send_meet_link'),
]
