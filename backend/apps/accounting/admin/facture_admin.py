# apps/accounting/admin/facture_admin.py
from django.contrib import admin

from apps.accounting.models import ConversionDevise, Facture, TauxChange


@admin.register(Facture)
class FactureAdmin(admin.ModelAdmin):
    list_display = ['numero', 'type', 'tiers', 'date_facture', 'date_echeance', 'total_ttc', 'montant_regle', 'statut']
    list_filter = ['type', 'statut']
    search_fields = ['numero', 'tiers__raison_sociale']
    autocomplete_fields = ['tiers', 'compte_gestion', 'compte_tva']
    readonly_fields = ['total_ttc', 'montant_regle', 'statut', 'ecriture']


@admin.register(TauxChange)
class TauxChangeAdmin(admin.ModelAdmin):
    list_display = ['devise_source', 'devise_cible', 'taux', 'date', 'source']
    list_filter = ['devise_source', 'devise_cible']
    ordering = ['-date']


@admin.register(ConversionDevise)
class ConversionDeviseAdmin(admin.ModelAdmin):
    list_display = ['date_conversion', 'montant_source', 'devise_source', 'montant_cible', 'devise_cible',
                    'taux_change', 'ecriture']
    list_filter = ['devise_source', 'devise_cible']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
