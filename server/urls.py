"""
Main URL mapping configuration file.

Include other URLConfs from external apps using method `include()`.
"""

from django.urls import include, path

urlpatterns = [
    path('api/', include('server.apps.files.urls')),
]
