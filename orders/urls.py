from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    # Order card
    path('', views.order_card, name='order_card'),
    path('<int:order_id>/', views.order_detail, name='order_detail'),
    path('<int:order_id>/print/', views.print_order, name='print_order'),

    # AJAX
    path('save/', views.save_order, name='save_order'),
    path('<int:order_id>/update/', views.update_order, name='update_order'),
    path('<int:order_id>/delete/', views.delete_order, name='delete_order'),
    path('api/prescription/<int:prescription_id>/', views.orders_for_prescription, name='orders_for_prescription'),
    path('api/calculate/', views.calculate_order, name='calculate_order'),
]
