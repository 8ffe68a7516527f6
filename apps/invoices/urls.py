from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'invoices'

router = DefaultRouter()
router.register(r'', views.InvoiceViewSet, basename='invoice')

urlpatterns = [
    # Invoice ViewSet routes
    # GET    /api/invoices/                      - List (history window applied)
    # POST   /api/invoices/                      - Create with items
    # POST   /api/invoices/upsert/               - Create or update
    # GET    /api/invoices/{id}/pdf/             - PDF download
    # GET    /api/invoices/{id}/jpeg/?quality=   - JPEG download
    # GET    /api/invoices/next-sequence/        - Store's next daily sequence
    # POST   /api/invoices/calculate/            - Totals preview
    # GET    /api/invoices/reports/months/       - Months with a report
    # GET    /api/invoices/reports/monthly/      - Monthly report
    # GET    /api/invoices/reports/revenue/      - Revenue metrics
    path('', include(router.urls)),
]
