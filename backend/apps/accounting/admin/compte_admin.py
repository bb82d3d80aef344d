# apps/accounting/admin/compte_admin.py
from django.contrib import admin
from django.utils.html import format_html

from apps.accounting.models import CompteOHADA


@admin.register(CompteOHADA)
class CompteOHADAAdmin(admin.ModelAdmin):
    """Plan comptable : rubrique OHADA calculée, comptes hors nomenclature signalés"""

    list_display = ['code', 'libelle', 'classe', 'type', 'rubrique_display', 'devise', 'is_active']
    list_filter = ['classe', 'type', 'is_active', 'reconciliable']
    search_fields = ['code', 'libelle']
    ordering = ['code']
    list_per_page = 50

    actions = ['activer_comptes', 'desactiver_comptes']

    fieldsets = (
        ('Informations principales', {
            'fields': ('code', 'libelle', 'classe', 'type', 'parent')
        }),
        ('Paramètres', {
            'fields': ('solde_normal', 'reconciliable', 'devise', 'note')
        }),
        ('Statut', {
            'fields': ('is_active',)
        }),
    )

    readonly_fields = ('classe',)
    autocomplete_fields = ['parent']

    def rubrique_display(self, obj):
        classement = obj.classement
        if not classement.est_classe:
            return format_html('<span style="color: #c0392b;">{}</span>', "Hors nomenclature")
        return classement.rubrique

    rubrique_display.short_description = "Rubrique OHADA"

    def activer_comptes(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} compte(s) activé(s) avec succès.")

    activer_comptes.short_description = "Activer les comptes sélectionnés"

    def desactiver_comptes(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} compte(s) désactivé(s) avec succès.")

    desactiver_comptes.short_description = "Désactiver les comptes sélectionnés"
