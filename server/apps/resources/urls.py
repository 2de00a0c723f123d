"""URL routes of the resource collection API."""

from django.urls import path

from server.apps.resources import views

app_name = 'resources'

_PREFIX = '<str:project_id>/<str:collection>/'

urlpatterns = [
    path(_PREFIX, views.collection_view, name='collection'),
    path(f'{_PREFIX}folders/', views.create_folder_view, name='folders'),
    path(f'{_PREFIX}upload/', views.upload_view, name='upload'),
    path(f'{_PREFIX}tags/', views.tags_view, name='tags'),
    path(f'{_PREFIX}<uuid:node_id>/', views.node_view, name='node'),
    path(f'{_PREFIX}<uuid:node_id>/move/', views.move_view, name='move'),
    path(f'{_PREFIX}<uuid:node_id>/access/', views.access_view, name='access'),
    path(
        f'{_PREFIX}<uuid:node_id>/download/',
        views.download_view,
        name='download',
    ),
]
