from django.urls import path
from . import views

app_name = 'subscriptions'

urlpatterns = [
    # Subscription status
    path('status/', views.subscription_status, name='status'),
    path('features/', views.subscription_features, name='features'),
    path('plans/', views.plan_list, name='plans'),

    # Payments
    # GET  /api/subscriptions/payments/               - List own payments
    # POST /api/subscriptions/payments/               - Create checkout
    # POST /api/subscriptions/payments/{id}/verify/   - Verify with provider
    # GET  /api/subscriptions/payments/{id}/qr/       - Checkout QR code
    path('payments/', views.payments, name='payments'),
    path('payments/lookup/', views.payment_lookup, name='payment-lookup'),
    path('payments/webhook/', views.payment_webhook, name='payment-webhook'),
    path('payments/<uuid:pk>/verify/', views.payment_verify, name='payment-verify'),
    path('payments/<uuid:pk>/qr/', views.payment_qr, name='payment-qr'),
]
