# apps/accounting/admin/journal_admin.py
from django.contrib import admin
from django.utils.html import format_html

from apps.accounting.models import Journal


@admin.register(Journal)
class JournalAdmin(admin.ModelAdmin):
    """Administration des journaux comptables"""

    list_display = ['code', 'libelle', 'type_display', 'compte_contrepartie', 'is_active_icon']
    list_filter = ['type', 'is_active']
    search_fields = ['code', 'libelle']
    ordering = ['code']

    fieldsets = (
        ('Informations principales', {
            'fields': ('code', 'libelle', 'type')
        }),
        ('Configuration', {
            'fields': ('compte_contrepartie', 'is_active'),
        }),
    )

    autocomplete_fields = ['compte_contrepartie']

    def type_display(self, obj):
        return f"{obj.type} - {obj.get_type_display()}"

    type_display.short_description = "Type de journal"

    def is_active_icon(self, obj):
        if obj.is_active:
            return format_html('<span style="color: green;">{}</span>', "✓ Actif")
        return format_html('<span style="color: red;">{}</span>', "✗ Inactif")

    is_active_icon.short_description = "Statut"
