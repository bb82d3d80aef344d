# apps/accounting/services/depot.py
"""
Lecture des données comptables pour le moteur

Charge en une requête les lignes validées jointes à leur écriture
(date, numéro, journal, statut), filtrées par comptes et par dates,
et les convertit en instantanés immuables.
"""

import logging
from decimal import Decimal

from apps.accounting.models import CompteOHADA, Facture, LigneEcriture, Tiers
from apps.accounting.moteur.plan_comptable import PlanComptable
from apps.accounting.moteur.types import VALIDEE, LigneComptabilisee

logger = logging.getLogger(__name__)


class DepotComptable:

    def __init__(self, contexte):
        self.contexte = contexte

    def plan(self):
        return PlanComptable(c.vers_moteur() for c in CompteOHADA.objects.all())

    def tiers(self):
        return [t.vers_moteur() for t in Tiers.objects.all()]

    def lignes(self, compte_ids=None, fin=None, debut=None, journal_id=None, statut=VALIDEE):
        """
        Lignes comptabilisées, triées par (date, numéro).

        `fin` est inclus ; sans `debut`, toutes les lignes antérieures
        sont chargées (nécessaires aux soldes d'ouverture).
        """
        queryset = LigneEcriture.objects.select_related('ecriture').filter(ecriture__statut=statut)
        if compte_ids is not None:
            queryset = queryset.filter(compte_id__in=list(compte_ids))
        if debut is not None:
            queryset = queryset.filter(ecriture__date_ecriture__gte=debut)
        if fin is not None:
            queryset = queryset.filter(ecriture__date_ecriture__lte=fin)
        if journal_id is not None:
            queryset = queryset.filter(ecriture__journal_id=journal_id)

        lignes = [
            LigneComptabilisee(
                compte_id=ligne.compte_id,
                date=ligne.ecriture.date_ecriture,
                numero=ligne.ecriture.numero,
                debit=ligne.montant_debit or Decimal('0'),
                credit=ligne.montant_credit or Decimal('0'),
                journal_id=ligne.ecriture.journal_id,
                tiers_id=ligne.tiers_id,
                devise=ligne.devise or self.contexte.devise_base,
                taux_change=ligne.taux_change,
                statut=ligne.ecriture.statut,
                libelle=ligne.libelle,
                reference=ligne.ecriture.reference,
                ecriture_id=ligne.ecriture_id,
                date_echeance=ligne.date_echeance,
                montant_base=ligne.montant_base,
            )
            for ligne in queryset.order_by('ecriture__date_ecriture', 'ecriture__numero', 'numero_ligne')
        ]
        logger.debug("%s lignes chargées (%s)", len(lignes), self.contexte.tenant)
        return lignes

    def factures_ouvertes(self, type_facture='client'):
        """Factures comptabilisées non soldées"""
        queryset = Facture.objects.filter(type=type_facture, statut='COMPTABILISEE')
        return [f.vers_moteur() for f in queryset if f.reste_a_payer > 0]
