# apps/accounting/admin/tiers_admin.py
from django.contrib import admin
from django.utils.html import format_html

from apps.accounting.models import Tiers


@admin.register(Tiers)
class TiersAdmin(admin.ModelAdmin):
    """Tiers : code et compte collectif générés à l'enregistrement"""

    list_display = ['code', 'raison_sociale', 'type_tiers', 'compte_collectif', 'solde_display', 'statut_display']
    list_filter = ['type_tiers', 'is_active', 'is_bloque']
    search_fields = ['code', 'raison_sociale', 'sigle', 'numero_contribuable', 'matricule']
    ordering = ['type_tiers', 'code']
    list_per_page = 25

    fieldsets = (
        ('Identification', {
            'fields': ('type_tiers', 'code', 'raison_sociale', 'sigle', 'matricule', 'numero_contribuable')
        }),
        ('Coordonnées', {
            'fields': ('adresse', 'ville', 'pays', 'telephone', 'email')
        }),
        ('Conditions commerciales', {
            'fields': ('delai_paiement', 'plafond_credit'),
        }),
        ('Statut', {
            'fields': ('is_active', 'is_bloque', 'motif_blocage')
        }),
        ('Comptabilité', {
            'fields': ('compte_collectif', 'created_at', 'updated_at', 'created_by'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = ['code', 'created_at', 'updated_at', 'created_by']

    actions = ['debloquer_tiers']

    def solde_display(self, obj):
        return obj.solde_comptable

    solde_display.short_description = "Solde"

    def statut_display(self, obj):
        if obj.is_bloque:
            return format_html('<span style="color: red;" title="{}">{}</span>', obj.motif_blocage, "Bloqué")
        if not obj.is_active:
            return "Inactif"
        return "Actif"

    statut_display.short_description = "Statut"

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)

    def debloquer_tiers(self, request, queryset):
        for tiers in queryset.filter(is_bloque=True):
            tiers.debloquer()
        self.message_user(request, "Tiers débloqués.")

    debloquer_tiers.short_description = "Débloquer les tiers sélectionnés"
