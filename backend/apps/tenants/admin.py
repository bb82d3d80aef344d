from django.contrib import admin
from django.db import connection
from .models import Tenant, Domain


class PublicSchemaOnlyAdmin(admin.ModelAdmin):
    """Admin qui s'affiche uniquement dans le schéma public"""
    def has_module_permission(self, request):
        return connection.schema_name == 'public'


@admin.register(Tenant)
class TenantAdmin(PublicSchemaOnlyAdmin):
    list_display = ['name', 'schema_name', 'devise_base', 'tolerance_equilibre', 'created_on']
    search_fields = ['name', 'email', 'schema_name']
    readonly_fields = ['created_on']


@admin.register(Domain)
class DomainAdmin(PublicSchemaOnlyAdmin):
    list_display = ['domain', 'tenant', 'is_primary']
    list_filter = ['is_primary']
    search_fields = ['domain', 'tenant__name']
