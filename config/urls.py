from django.contrib import admin
from django.contrib.auth import views as auth_views
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('accounts/login/', auth_views.LoginView.as_view(), name='login'),
    path('accounts/logout/', auth_views.LogoutView.as_view(), name='logout'),

    path('', include('core.urls')),
    path('prescriptions/', include('prescriptions.urls')),
    path('contact-lens/', include('contact_lens.urls')),
    path('orders/', include('orders.urls')),
    path('billing/', include('billing.urls')),
]
