"""
Listing URL Configuration
"""
from django.urls import path
from .views import ListingView

app_name = 'listing'

urlpatterns = [
    path('', ListingView.as_view(), name='detail'),
    path('/', ListingView.as_view()),
]
