from django.urls import path
from . import views

app_name = 'prescriptions'

urlpatterns = [
    # Entry screen
    path('', views.prescription_form, name='prescription_form'),
    path('new/', views.prescription_new, name='prescription_new'),
    path('<int:prescription_id>/', views.prescription_edit, name='prescription_edit'),
    path('<int:prescription_id>/delete/', views.prescription_delete, name='prescription_delete'),

    # AJAX Endpoints
    path('save/', views.save_prescription, name='save_prescription'),
    path('api/search/', views.search_prescriptions, name='search_prescriptions'),
    path('api/<int:prescription_id>/', views.get_prescription_data, name='get_prescription_data'),
]
