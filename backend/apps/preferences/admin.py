from django.contrib import admin
from .models import Setting


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ['setting_name', 'setting_value', 'description']
    search_fields = ['setting_name', 'description']
