from django.urls import path
from . import views

app_name = 'rides'

urlpatterns = [
    # Public browse
    path('upcoming/', views.upcoming_rides, name='upcoming'),
    path('search/', views.search_rides, name='search'),
    path('<int:ride_id>/', views.ride_detail, name='ride-detail'),

    # Ride requests for drivers
    path('requests/', views.active_ride_requests, name='active-ride-requests'),
    path('requests/<int:request_id>/', views.ride_request_detail, name='ride-request-detail'),
]
