# apps/accounting/services/etats.py
"""
Génération des états : chargement des données du schéma courant
puis appel du moteur. Aucun calcul comptable ici.
"""

import logging

from apps.accounting.moteur import balance_agee
from apps.accounting.moteur.etats import (
    balance_generale, balance_tiers, deriver_etats_financiers, grand_livre,
    journal_auxiliaire, livre_tresorerie,
)
from .depot import DepotComptable

logger = logging.getLogger(__name__)


def generer_balance_generale(contexte, debut, fin, devise=None):
    depot = DepotComptable(contexte)
    balance = balance_generale(
        depot.plan(), depot.lignes(fin=fin), debut, fin,
        devise=devise, tolerance=contexte.tolerance,
    )
    if not balance.equilibree:
        logger.warning(
            "Balance générale déséquilibrée (%s) du %s au %s : écart %s",
            contexte.tenant, debut, fin, balance.ecart
        )
    return balance


def generer_grand_livre(contexte, debut, fin, compte_ids=None, devise=None):
    depot = DepotComptable(contexte)
    return grand_livre(depot.plan(), depot.lignes(compte_ids=compte_ids, fin=fin), debut, fin,
                       compte_ids=compte_ids, devise=devise)


def generer_livre_tresorerie(contexte, debut, fin, nature=None, devise=None):
    depot = DepotComptable(contexte)
    return livre_tresorerie(depot.plan(), depot.lignes(fin=fin), debut, fin, nature=nature, devise=devise)


def generer_journal(contexte, journal_id, debut, fin):
    depot = DepotComptable(contexte)
    return journal_auxiliaire(depot.lignes(debut=debut, fin=fin, journal_id=journal_id), journal_id, debut, fin)


def generer_balance_tiers(contexte, debut, fin, rubrique='fournisseurs'):
    depot = DepotComptable(contexte)
    return balance_tiers(depot.plan(), depot.tiers(), depot.lignes(debut=debut, fin=fin), debut, fin, rubrique)


def generer_etats_financiers(contexte, debut, fin):
    depot = DepotComptable(contexte)
    return deriver_etats_financiers(contexte, depot.plan(), depot.lignes(fin=fin), debut, fin)


def generer_balance_agee(contexte, date_reference, type_facture='client'):
    depot = DepotComptable(contexte)
    lignes = balance_agee.ventiler_echeances(depot.factures_ouvertes(type_facture), date_reference)
    return balance_agee.trier_par_total(lignes)
