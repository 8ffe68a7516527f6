from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'stores'

# Explicit paths must come before the router: its empty prefix would
# otherwise capture "preferences/" as a store id.
router = DefaultRouter()
router.register(r'', views.StoreViewSet, basename='store')

urlpatterns = [
    # Preferences
    path('preferences/', views.preferences, name='preferences'),

    # Contacts
    path('contacts/<uuid:pk>/', views.contact_detail, name='contact-detail'),
    path('contacts/<uuid:pk>/set-primary/', views.contact_set_primary, name='contact-set-primary'),

    # Store ViewSet routes
    # GET    /api/stores/                          - List stores
    # POST   /api/stores/                          - Create store
    # GET    /api/stores/default/                  - Default store
    # POST   /api/stores/{id}/set-default/         - Make default
    # GET    /api/stores/{id}/contacts/            - List contacts
    # PUT    /api/stores/{id}/primary-contact/     - Upsert primary contact
    # POST   /api/stores/{id}/next-invoice-number/ - Consume next number
    path('', include(router.urls)),
]
