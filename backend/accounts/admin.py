from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "phone_number", "first_name",
                    "last_name", "role", "department", "is_active")
    search_fields = ("username", "email", "phone_number", "employee_id")
    list_filter = ("role", "department", "is_active")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Portal", {"fields": ("phone_number", "role", "department", "employee_id")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Portal", {"fields": ("email", "phone_number", "first_name",
                               "last_name", "role", "department", "employee_id")}),
    )
