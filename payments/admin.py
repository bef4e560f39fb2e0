from django.contrib import admin
from .models import MpesaTransaction, Payment

@admin.register(MpesaTransaction)
class MpesaTransactionAdmin(admin.ModelAdmin):
    list_display = ('id', 'phone_number', 'amount', 'reference_code', 'is_complete', 'is_successful', 'created_at')
    search_fields = ('phone_number', 'merchant_request_id', 'checkout_request_id', 'mpesa_receipt_number')
    list_filter = ('is_complete', 'is_successful')
    readonly_fields = ('merchant_request_id', 'checkout_request_id', 'callback_metadata', 'created_at', 'updated_at')

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'session', 'amount', 'payment_status', 'payment_date')
    search_fields = ('stripe_payment_id',)
    list_filter = ('payment_status',)
