from decimal import Decimal

from django.db import models
from django_tenants.models import TenantMixin


class Tenant(TenantMixin):
    """
    Société cliente : un schéma PostgreSQL par société.

    Porte la configuration comptable propre à la société, reprise dans
    le ContexteSociete passé au moteur.
    """

    name = models.CharField(max_length=255, verbose_name="Nom")
    email = models.EmailField(blank=True)
    created_on = models.DateField(auto_now_add=True)

    devise_base = models.CharField(
        max_length=3,
        default='XAF',
        help_text="Devise de tenue de la comptabilité"
    )
    tolerance_equilibre = models.DecimalField(
        max_digits=6,
        decimal_places=4,
        default=Decimal('0.01'),
        help_text="Écart d'arrondi toléré sur les écritures multi-devises"
    )
    # {"USD/CDF": "2000"}
    taux_par_defaut = models.JSONField(
        default=dict,
        blank=True,
        help_text="Taux utilisés lorsqu'aucun taux n'est enregistré"
    )

    auto_create_schema = True

    def __str__(self):
        return self.name
