from django.urls import path
from . import views

urlpatterns = [
    # M-Pesa STK Push
    path('initiate', views.mpesa_initiate, name='mpesa_initiate'),
    path('callback', views.mpesa_callback, name='mpesa_callback'),
    path('transaction/<str:checkout_request_id>', views.transaction_status, name='transaction_status'),
    path('transactions', views.transaction_list, name='transaction_list'),
    # Stripe
    path('create-payment-intent', views.create_payment_intent, name='create_payment_intent'),
    path('webhook', views.stripe_webhook, name='stripe_webhook'),
    path('payments', views.PaymentResource.as_view(), name='payments'),
    path('payments/<int:pk>', views.PaymentResource.as_view(), name='payment_detail'),
]
