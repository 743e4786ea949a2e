from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check), # Health check endpoint

    # Authentication endpoints (at /api/auth/)
    path('api/auth/', include('accounts.urls')),  # register, login, refresh, me

    # Workshop APIs (profile, stats, nearby requests, public reviews)
    path('api/workshops/', include('workshops.urls')),

    # Repair marketplace endpoints (vehicles, requests, offers, bookings, reviews)
    path('api/repairs/', include('repairs.urls')),

    # Platform admin endpoints (payouts, workshop verification)
    path('api/admin/', include('market_backend.admin_urls')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
