# apps/accounting/services/contexte.py
"""
Construction du ContexteSociete

Le moteur ne lit jamais de configuration globale : la vue construit le
contexte de la société courante (django-tenants) et le passe à chaque
appel. Sans tenant (tests, commandes), la configuration COMPTABILITE
des settings s'applique.
"""

from decimal import Decimal

from django.conf import settings
from django.db import connection

from apps.accounting.moteur.exceptions import ParametreInvalide
from apps.accounting.moteur.types import ContexteSociete, en_decimal


def _lire_taux(mapping):
    """{"USD/CDF": "2000"} -> {("USD", "CDF"): Decimal("2000")}"""
    taux = {}
    for paire, valeur in (mapping or {}).items():
        source, _, cible = paire.partition('/')
        if not source or not cible:
            raise ParametreInvalide(f"Paire de devises invalide : {paire!r} (attendu 'USD/CDF')")
        taux[(source.strip().upper(), cible.strip().upper())] = en_decimal(valeur)
    return taux


def configuration():
    return getattr(settings, 'COMPTABILITE', {})


def contexte_par_defaut(tenant=None):
    config = configuration()
    return ContexteSociete(
        tenant=tenant or getattr(connection, 'schema_name', None) or 'public',
        devise_base=config.get('DEVISE_BASE', 'XAF'),
        tolerance=en_decimal(config.get('TOLERANCE_EQUILIBRE', Decimal('0.01'))),
        taux_par_defaut=_lire_taux(config.get('TAUX_PAR_DEFAUT')),
    )


def contexte_depuis_tenant(tenant):
    """Contexte d'une société django-tenants ; ses taux complètent ceux des settings"""
    defaut = contexte_par_defaut(tenant.schema_name)
    taux = dict(defaut.taux_par_defaut)
    taux.update(_lire_taux(getattr(tenant, 'taux_par_defaut', None)))
    return ContexteSociete(
        tenant=tenant.schema_name,
        devise_base=getattr(tenant, 'devise_base', None) or defaut.devise_base,
        tolerance=en_decimal(getattr(tenant, 'tolerance_equilibre', None) or defaut.tolerance),
        taux_par_defaut=taux,
    )


def contexte_depuis_requete(request):
    tenant = getattr(request, 'tenant', None)
    if tenant is not None and hasattr(tenant, 'schema_name'):
        return contexte_depuis_tenant(tenant)
    return contexte_par_defaut()
