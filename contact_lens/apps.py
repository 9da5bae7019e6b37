# contact_lens/apps.py
from django.apps import AppConfig


class ContactLensConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'contact_lens'
    verbose_name = 'Contact Lens'
