# apps/accounting/moteur/balance_agee.py
"""
Balance âgée des créances clients et des dettes fournisseurs

Chaque facture non soldée est rangée dans une tranche selon son
retard à la date de référence :
- non échu (retard négatif)
- 0 à 30 jours
- 31 à 60 jours
- 61 à 90 jours
- plus de 90 jours
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from .types import ZERO, Facture


@dataclass
class LigneBalanceAgee:
    tiers_id: Any = None
    courant: Decimal = ZERO
    j1_30: Decimal = ZERO
    j31_60: Decimal = ZERO
    j61_90: Decimal = ZERO
    plus_90: Decimal = ZERO
    total: Decimal = ZERO
    nb_factures: int = 0

    def ajouter(self, tranche: str, montant: Decimal) -> None:
        setattr(self, tranche, getattr(self, tranche) + montant)
        self.total += montant
        self.nb_factures += 1

    @property
    def somme_tranches(self) -> Decimal:
        return self.courant + self.j1_30 + self.j31_60 + self.j61_90 + self.plus_90


def tranche(jours_retard: int) -> str:
    if jours_retard < 0:
        return 'courant'
    if jours_retard <= 30:
        return 'j1_30'
    if jours_retard <= 60:
        return 'j31_60'
    if jours_retard <= 90:
        return 'j61_90'
    return 'plus_90'


def jours_de_retard(facture: Facture, date_reference: date) -> int:
    echeance = facture.date_echeance or facture.date
    return (date_reference - echeance).days


def ventiler_echeances(factures: Iterable[Facture], date_reference: date) -> Dict[Any, LigneBalanceAgee]:
    """
    Balance âgée par tiers.

    Le même calcul sert aux factures clients et fournisseurs : l'appelant
    choisit le jeu de factures.
    """
    lignes: Dict[Any, LigneBalanceAgee] = {}

    for facture in factures:
        reste = facture.reste_a_payer
        if reste <= 0:
            continue

        ligne = lignes.get(facture.tiers_id)
        if ligne is None:
            ligne = lignes[facture.tiers_id] = LigneBalanceAgee(tiers_id=facture.tiers_id)

        ligne.ajouter(tranche(jours_de_retard(facture, date_reference)), reste)

    return lignes


def trier_par_total(lignes: Dict[Any, LigneBalanceAgee]) -> List[LigneBalanceAgee]:
    return sorted(lignes.values(), key=lambda l: l.total, reverse=True)


def totaliser(lignes: Iterable[LigneBalanceAgee]) -> LigneBalanceAgee:
    cumul = LigneBalanceAgee()
    for ligne in lignes:
        cumul.courant += ligne.courant
        cumul.j1_30 += ligne.j1_30
        cumul.j31_60 += ligne.j31_60
        cumul.j61_90 += ligne.j61_90
        cumul.plus_90 += ligne.plus_90
        cumul.total += ligne.total
        cumul.nb_factures += ligne.nb_factures
    return cumul
