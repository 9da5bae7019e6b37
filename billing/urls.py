from django.urls import path
from . import views

app_name = 'billing'

urlpatterns = [
    path('', views.billing, name='billing'),
    path('print/', views.print_bill, name='print_bill'),

    # AJAX
    path('api/search/', views.search, name='search'),
    path('api/record/<str:source_type>/<int:record_id>/', views.record_details, name='record_details'),
    path('api/history/', views.purchase_history, name='purchase_history'),
    path('api/calculate/', views.calculate_bill, name='calculate_bill'),
]
