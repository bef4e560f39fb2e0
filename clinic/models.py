from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class User(models.Model):
    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        THERAPIST = 'therapist', 'Therapist'
        USER = 'user', 'User'

    full_name = models.TextField()
    email = models.EmailField(max_length=255, unique=True)
    contact_phone = models.CharField(max_length=20, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'user'

    def __str__(self):
        return f"{self.full_name} <{self.email}>"


class Therapist(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='therapists')
    full_name = models.TextField()
    specialization = models.CharField(max_length=255, blank=True, null=True)
    experience_years = models.PositiveIntegerField(default=0)
    contact_phone = models.CharField(max_length=20, blank=True, null=True)
    availability = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'therapists'
        verbose_name = 'therapist'

    def __str__(self):
        return f"{self.full_name} ({self.specialization or 'general'})"


class TherapySession(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sessions')
    therapist = models.ForeignKey(Therapist, on_delete=models.CASCADE, related_name='sessions')
    session_date = models.DateField()
    session_notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sessions'
        verbose_name = 'session'

    def __str__(self):
        return f"session {self.pk} on {self.session_date}"


class Diagnostic(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='diagnostics')
    diagnosis = models.CharField(max_length=255)
    recommendations = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'diagnostics'
        verbose_name = 'diagnostic'

    def __str__(self):
        return self.diagnosis


class Feedback(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='feedback')
    session = models.ForeignKey(TherapySession, on_delete=models.CASCADE, related_name='feedback')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comments = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'feedback'
        verbose_name = 'feedback'
        verbose_name_plural = 'feedback'

    def __str__(self):
        return f"{self.rating}/5 for session {self.session_id}"


class Booking(models.Model):
    class Status(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        CONFIRMED = 'Confirmed', 'Confirmed'
        CANCELLED = 'Cancelled', 'Cancelled'
        COMPLETED = 'Completed', 'Completed'

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    therapist = models.ForeignKey(Therapist, on_delete=models.CASCADE, related_name='bookings')
    session_date = models.DateField()
    session_time = models.TimeField()
    booking_status = models.CharField(max_length=50, choices=Status.choices, default=Status.PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        verbose_name = 'booking'

    def __str__(self):
        return f"{self.user_id} with {self.therapist_id} on {self.session_date} {self.session_time}"


class Resource(models.Model):
    """Self-help reading material."""

    title = models.CharField(max_length=255)
    content = models.TextField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'resources'
        verbose_name = 'resource'

    def __str__(self):
        return self.title
