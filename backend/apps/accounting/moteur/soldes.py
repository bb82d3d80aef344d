# apps/accounting/moteur/soldes.py
"""
Cumul des soldes par compte

Moteur numérique commun à tous les états :
- solde d'ouverture : lignes antérieures au début de période
- mouvements de la période : lignes comprises entre deux dates
- solde progressif : cumul ordonné des lignes d'un compte (grand livre)

Convention de signe unique : net = débit - crédit.
Net positif -> solde débiteur, net négatif -> solde créditeur.
Le cumul ne connaît pas la nature des comptes ; c'est à l'appelant
de savoir si un solde débiteur est « normal » pour une classe donnée.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import ParametreInvalide
from .types import VALIDEE, ZERO, LigneComptabilisee, Solde


@dataclass(frozen=True)
class Plage:
    """
    Intervalle de dates.

    - Plage.avant(d) : lignes strictement antérieures à d
    - Plage.entre(d1, d2) : lignes de d1 à d2 inclus
    - Plage.jusqu_au(d) : toutes les lignes jusqu'à d inclus
    """
    debut: Optional[date] = None
    fin: Optional[date] = None
    fin_exclue: bool = False

    @classmethod
    def avant(cls, jour: date) -> 'Plage':
        return cls(None, jour, True)

    @classmethod
    def entre(cls, debut: date, fin: date) -> 'Plage':
        if debut and fin and debut > fin:
            raise ParametreInvalide("La date de début doit précéder la date de fin")
        return cls(debut, fin, False)

    @classmethod
    def jusqu_au(cls, jour: date) -> 'Plage':
        return cls(None, jour, False)

    def contient(self, jour: date) -> bool:
        if self.debut is not None and jour < self.debut:
            return False
        if self.fin is not None:
            if self.fin_exclue and jour >= self.fin:
                return False
            if not self.fin_exclue and jour > self.fin:
                return False
        return True


def _montants(ligne: LigneComptabilisee, devise: Optional[str]) -> Tuple[Decimal, Decimal]:
    if devise is None:
        return ligne.debit_base, ligne.credit_base
    return ligne.debit, ligne.credit


def _retenue(ligne: LigneComptabilisee, plage: Optional[Plage], devise: Optional[str]) -> bool:
    if ligne.statut != VALIDEE:
        return False
    if devise is not None and ligne.devise != devise:
        return False
    return plage is None or plage.contient(ligne.date)


def accumuler(lignes: Iterable[LigneComptabilisee], plage: Optional[Plage] = None,
              devise: Optional[str] = None) -> Dict:
    """
    Cumule débit et crédit par compte sur une plage de dates.

    Seules les lignes validées sont prises en compte. Les montants sont
    en devise de base, sauf si `devise` est fourni : seules les lignes de
    cette devise sont alors retenues, avec leurs montants d'origine.

    Fonction pure : même entrée, même sortie.
    """
    cumuls: Dict = {}
    for ligne in lignes:
        if not _retenue(ligne, plage, devise):
            continue
        debit, credit = _montants(ligne, devise)
        cumuls[ligne.compte_id] = cumuls.get(ligne.compte_id, Solde()) + Solde(debit, credit)
    return cumuls


def ventiler(net: Decimal) -> Tuple[Decimal, Decimal]:
    """Répartit un solde net en (colonne débit, colonne crédit)"""
    if net > 0:
        return net, ZERO
    if net < 0:
        return ZERO, -net
    return ZERO, ZERO


def cle_de_tri(ligne: LigneComptabilisee):
    return (ligne.date, ligne.numero)


def trier_lignes(lignes: Iterable[LigneComptabilisee]) -> List[LigneComptabilisee]:
    """Ordre du grand livre : date puis numéro d'écriture (ordre lexical)"""
    return sorted(lignes, key=cle_de_tri)


def solde_progressif(lignes: Iterable[LigneComptabilisee], compte_id, solde_initial: Decimal = ZERO,
                     plage: Optional[Plage] = None,
                     devise: Optional[str] = None) -> List[Tuple[LigneComptabilisee, Decimal]]:
    """
    Lignes d'un compte triées, chacune accompagnée du solde cumulé
    après son imputation.
    """
    retenues = [
        ligne for ligne in lignes
        if ligne.compte_id == compte_id and _retenue(ligne, plage, devise)
    ]

    cumul = solde_initial
    resultat = []
    for ligne in trier_lignes(retenues):
        debit, credit = _montants(ligne, devise)
        cumul += debit - credit
        resultat.append((ligne, cumul))
    return resultat


def total(soldes: Dict) -> Solde:
    return sum(soldes.values(), Solde())
