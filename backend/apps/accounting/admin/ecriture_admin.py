# apps/accounting/admin/ecriture_admin.py
from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.html import format_html

from apps.accounting.models import EcritureComptable, LigneEcriture
from apps.accounting.moteur.exceptions import ErreurComptable
from apps.accounting.services.comptabilisation import comptabiliser_ecriture


class LigneEcritureInline(admin.TabularInline):
    model = LigneEcriture
    extra = 2
    fields = ['numero_ligne', 'compte', 'tiers', 'libelle', 'montant_debit', 'montant_credit',
              'devise', 'taux_change', 'montant_base', 'date_echeance']
    autocomplete_fields = ['compte', 'tiers']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('compte', 'tiers')

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.est_validee:
            return False
        return super().has_change_permission(request, obj)

    def has_add_permission(self, request, obj=None):
        if obj is not None and obj.est_validee:
            return False
        return super().has_add_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.est_validee:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(EcritureComptable)
class EcritureComptableAdmin(admin.ModelAdmin):
    """
    Saisie en-tête + lignes. Une écriture validée est en lecture seule ;
    la validation passe par l'action dédiée (contrôle d'équilibre).
    """

    list_display = ['numero', 'journal', 'date_ecriture', 'libelle', 'total_debit', 'total_credit', 'statut_display']
    list_filter = ['statut', 'journal', ('date_ecriture', admin.DateFieldListFilter)]
    search_fields = ['numero', 'libelle', 'reference']
    ordering = ['-date_ecriture', '-numero']
    date_hierarchy = 'date_ecriture'
    inlines = [LigneEcritureInline]

    fields = ['numero', 'journal', 'date_ecriture', 'date_piece', 'libelle', 'reference',
              'devise', 'taux_change', 'statut', 'date_validation', 'validee_par']
    readonly_fields = ['numero', 'statut', 'date_validation', 'validee_par']

    actions = ['valider_ecritures']

    def statut_display(self, obj):
        couleur = 'green' if obj.est_validee else 'orange'
        return format_html('<span style="color: {};">{}</span>', couleur, obj.get_statut_display())

    statut_display.short_description = "Statut"

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.est_validee:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.est_validee:
            return False
        return super().has_delete_permission(request, obj)

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)

    def valider_ecritures(self, request, queryset):
        validees = 0
        for ecriture in queryset.filter(statut='BROUILLON'):
            try:
                comptabiliser_ecriture(ecriture, user=request.user)
                validees += 1
            except (ErreurComptable, ValidationError) as e:
                self.message_user(request, f"{ecriture.numero} : {e}", level=messages.ERROR)
        self.message_user(request, f"{validees} écriture(s) validée(s).")

    valider_ecritures.short_description = "Valider les écritures sélectionnées"
