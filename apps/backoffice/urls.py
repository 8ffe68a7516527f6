from django.urls import path
from . import views

app_name = 'backoffice'

urlpatterns = [
    # GET    /api/backoffice/dashboard/
    path('dashboard/', views.dashboard, name='dashboard'),

    # Users
    path('users/', views.user_list, name='user-list'),
    path('users/<uuid:pk>/', views.user_detail, name='user-detail'),
    path('users/<uuid:pk>/upgrade/', views.user_upgrade, name='user-upgrade'),
    path('users/<uuid:pk>/downgrade/', views.user_downgrade, name='user-downgrade'),
    path('users/<uuid:pk>/extend/', views.user_extend, name='user-extend'),
    path('users/<uuid:pk>/reset-counter/', views.user_reset_counter, name='user-reset-counter'),

    # Stores
    path('stores/', views.store_list, name='store-list'),
    path('stores/<uuid:pk>/', views.store_detail, name='store-detail'),
    path('stores/<uuid:pk>/toggle-active/', views.store_toggle_active, name='store-toggle-active'),
    path('stores/<uuid:pk>/reset-counter/', views.store_reset_counter, name='store-reset-counter'),

    # Invoices
    path('invoices/', views.invoice_list, name='invoice-list'),
    # GET, DELETE /api/backoffice/invoices/{id}/
    path('invoices/<uuid:pk>/', views.invoice_detail, name='invoice-detail'),
    path('invoices/<uuid:pk>/status/', views.invoice_status, name='invoice-status'),

    # Payments and plans
    path('transactions/', views.transaction_list, name='transaction-list'),
    path('transactions/<uuid:pk>/verify/', views.transaction_verify, name='transaction-verify'),
    path('subscriptions/', views.subscription_list, name='subscription-list'),
    path('plans/', views.plan_list, name='plan-list'),
    # PATCH  /api/backoffice/plans/{id}/
    path('plans/<uuid:pk>/', views.plan_detail, name='plan-detail'),

    # Analytics
    # GET    /api/backoffice/analytics/{revenue,users,invoices}/?date_from=&date_to=
    path('analytics/revenue/', views.analytics_revenue, name='analytics-revenue'),
    path('analytics/users/', views.analytics_users, name='analytics-users'),
    path('analytics/invoices/', views.analytics_invoices, name='analytics-invoices'),
    # GET    /api/backoffice/analytics/{revenue,users,invoices}/export/ - CSV
    path('analytics/<str:report>/export/', views.analytics_export, name='analytics-export'),
]
