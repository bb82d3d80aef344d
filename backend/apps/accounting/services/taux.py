# apps/accounting/services/taux.py
from decimal import Decimal

from apps.accounting.models import TauxChange
from apps.accounting.moteur.devises import SourceTaux


class SourceTauxBase(SourceTaux):
    """
    Taux enregistrés dans la table TauxChange du schéma courant.

    Cherche d'abord la paire directe, puis la paire inverse (1 / taux).
    Le tenant n'est pas un filtre : chaque société a sa propre table.
    """

    def _dernier(self, devise_source, devise_cible, jour):
        queryset = TauxChange.objects.filter(devise_source=devise_source, devise_cible=devise_cible)
        if jour is not None:
            queryset = queryset.filter(date__lte=jour)
        return queryset.order_by('-date', '-created_at').first()

    def dernier_taux(self, tenant, devise_source, devise_cible, jour=None):
        direct = self._dernier(devise_source, devise_cible, jour)
        if direct is not None:
            return direct.taux

        inverse = self._dernier(devise_cible, devise_source, jour)
        if inverse is not None and inverse.taux > 0:
            return Decimal('1') / inverse.taux

        return None
