from django.urls import path
from . import views

app_name = 'sync'

urlpatterns = [
    # GET    /api/sync/queue/              - Pending writes
    # POST   /api/sync/queue/              - Queue a write
    # DELETE /api/sync/queue/              - Clear the queue
    path('queue/', views.queue, name='queue'),
    # DELETE /api/sync/queue/{id}/         - Drop one write
    path('queue/<uuid:pk>/', views.queue_item, name='queue-item'),

    # POST   /api/sync/run/                - Replay the queue now
    path('run/', views.run, name='run'),
    # GET    /api/sync/status/             - Sync state
    path('status/', views.sync_status, name='status'),
    # POST   /api/sync/push/               - Apply a batch from an offline client
    path('push/', views.push, name='push'),

    # GET    /api/sync/changes/?since=&tables=
    path('changes/', views.changes, name='changes'),
    # POST   /api/sync/import/             - Post-signup import
    path('import/', views.import_local_data, name='import'),
]
