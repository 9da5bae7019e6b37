from django.urls import path
from . import views

app_name = 'contact_lens'

urlpatterns = [
    path('', views.contact_lens_form, name='contact_lens_form'),
    path('<int:cl_id>/print/', views.print_contact_lens, name='print_contact_lens'),

    # AJAX Endpoints
    path('save/', views.save_contact_lens, name='save_contact_lens'),
    path('<int:cl_id>/update/', views.update_contact_lens, name='update_contact_lens'),
    path('<int:cl_id>/delete/', views.delete_contact_lens, name='delete_contact_lens'),
    path('api/search/', views.search_patients, name='search_patients'),
    path('api/calculate/', views.calculate_payment, name='calculate_payment'),
    path('api/prescription/<int:prescription_id>/', views.contact_lens_for_prescription,
         name='contact_lens_for_prescription'),
    path('api/<int:cl_id>/', views.get_contact_lens, name='get_contact_lens'),
]
