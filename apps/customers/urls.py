from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'customers'

router = DefaultRouter()
router.register(r'', views.CustomerViewSet, basename='customer')

urlpatterns = [
    # GET    /api/customers/?store=&search=  - List customers
    # POST   /api/customers/                 - Create customer
    # GET    /api/customers/{id}/            - Customer detail
    # PATCH  /api/customers/{id}/            - Update customer
    # DELETE /api/customers/{id}/            - Soft delete
    path('', include(router.urls)),
]
