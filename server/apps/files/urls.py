from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    path('files', views.files, name='files'),
    path('files/bulk', views.files_bulk, name='files_bulk'),
    path('files/presigned-url', views.file_presigned_url, name='file_presigned_url'),
    path('files/metadata', views.files_metadata, name='files_metadata'),
    path('folders', views.folders, name='folders'),
    path('rename', views.rename, name='rename'),
    path('upload/presigned-url', views.upload_presigned_url, name='upload_presigned_url'),
    path('share/presigned-url', views.share_presigned_url, name='share_presigned_url'),
    path('download/folder', views.download_folder, name='download_folder'),
    path('analytics', views.analytics, name='analytics'),
]
