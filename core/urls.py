"""
URL configuration for the domain sale offer relay.

Public API:
    POST /api/contact   offer submission
    GET  /api/listing   sale page data
    GET  /sitemap.xml   localized pages
"""
from django.contrib.sitemaps.views import sitemap
from django.urls import path, include

from listing.sitemaps import sitemaps

urlpatterns = [
    path('api/contact', include('contact.urls')),  # Offer submissions
    path('api/listing', include('listing.urls')),  # Public listing data
    path('sitemap.xml', sitemap, {'sitemaps': sitemaps}, name='django.contrib.sitemaps.views.sitemap'),
]
