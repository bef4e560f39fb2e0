from django.http import JsonResponse

def index(request):
    return JsonResponse({
        "message": "Therapy booking & payments API",
        "endpoints": {
            "admin": "/admin/",
            "users": "/api/users",
            "therapists": "/api/therapists",
            "sessions": "/api/session",
            "diagnostics": "/api/diagnostics",
            "feedback": "/api/feedback",
            "bookings": "/api/bookings",
            "resources": "/api/resources",
            "payments": "/api/payments",
            "send_meet_link": "/api/send-meet-link",
            "mpesa_initiate": "/api/initiate",
            "mpesa_callback": "/api/callback",
            "mpesa_transaction": "/api/transaction/<checkout_request_id>",
            "mpesa_transactions": "/api/transactions",
            "stripe_payment_intent": "/api/create-payment-intent",
            "stripe_webhook": "/api/webhook",
        }
    })
