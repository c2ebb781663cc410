"""
Contact URL Configuration
"""
from django.urls import path
from .views import ContactRelayView

app_name = 'contact'

# Public URLs (no auth required)
urlpatterns = [
    path('', ContactRelayView.as_view(), name='submit'),
    path('/', ContactRelayView.as_view()),
]
