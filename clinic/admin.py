from django.contrib import admin
from .models import Booking, Diagnostic, Feedback, Resource, Therapist, TherapySession, User

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'email', 'role', 'created_at')
    search_fields = ('full_name', 'email', 'contact_phone')
    list_filter = ('role',)

@admin.register(Therapist)
class TherapistAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'specialization', 'experience_years', 'availability')
    search_fields = ('full_name', 'specialization')
    list_filter = ('availability',)

@admin.register(TherapySession)
class TherapySessionAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'therapist', 'session_date')
    list_filter = ('session_date',)

@admin.register(Diagnostic)
class DiagnosticAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'diagnosis', 'created_at')
    search_fields = ('diagnosis',)

@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'session', 'rating', 'created_at')
    list_filter = ('rating',)

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'therapist', 'session_date', 'session_time', 'booking_status')
    list_filter = ('booking_status', 'session_date')

@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'created_at')
    search_fields = ('title',)
