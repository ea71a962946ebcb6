"""
URL configuration for gti_gateway project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/gti/', include('gti.urls')),
]
