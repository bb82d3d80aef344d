# apps/accounting/moteur/etats/bilan.py
"""
Bilan OHADA

Établi sur les soldes cumulés à la date d'arrêté. Répartition :

- classe 1 : passif (capitaux propres, dettes financières, provisions)
- classe 2 : actif immobilisé, amortissements et dépréciations en moins
- classe 3 : stocks
- classe 4 : solde débiteur -> créances (actif),
             solde créditeur -> dettes (passif) ; dépréciations 49 à l'actif
- classe 5 : solde débiteur -> trésorerie actif,
             solde créditeur et crédits de trésorerie (56) -> trésorerie passif

Le résultat de l'exercice n'est pas repris au passif : il est calculé
à part, et total actif - total passif doit lui être égal.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from ..plan_comptable import PlanComptable
from ..types import ZERO, Solde

ACTIF = 'actif'
PASSIF = 'passif'

POSTES_ACTIF = (
    'immobilisations',
    'immobilisations_financieres',
    'amortissements_depreciations',
    'stocks',
    'creances',
    'tresorerie_actif',
)

POSTES_PASSIF = (
    'capitaux_propres',
    'dettes_financieres',
    'provisions',
    'dettes',
    'tresorerie_passif',
)

# Rubriques dont le côté ne dépend pas du sens du solde
AFFECTATION_FIXE = {
    'capitaux_propres': (PASSIF, 'capitaux_propres'),
    'dettes_financieres': (PASSIF, 'dettes_financieres'),
    'provisions_financieres': (PASSIF, 'provisions'),
    'immobilisations': (ACTIF, 'immobilisations'),
    'immobilisations_financieres': (ACTIF, 'immobilisations_financieres'),
    'amortissements': (ACTIF, 'amortissements_depreciations'),
    'depreciations_immobilisations': (ACTIF, 'amortissements_depreciations'),
    'stocks': (ACTIF, 'stocks'),
    'depreciations_stocks': (ACTIF, 'stocks'),
    'depreciations_tiers': (ACTIF, 'creances'),
    'credits_tresorerie': (PASSIF, 'tresorerie_passif'),
    'depreciations_tresorerie': (ACTIF, 'tresorerie_actif'),
}


@dataclass(frozen=True)
class LigneBilan:
    compte_id: Any
    code: str
    libelle: str
    cote: str
    poste: str
    montant: Decimal


@dataclass(frozen=True)
class Bilan:
    lignes: Tuple[LigneBilan, ...] = ()
    postes: Dict[str, Decimal] = field(default_factory=dict)
    resultat: Decimal = ZERO

    def poste(self, nom: str) -> Decimal:
        return self.postes.get(nom, ZERO)

    @property
    def total_actif(self) -> Decimal:
        return sum((self.poste(p) for p in POSTES_ACTIF), ZERO)

    @property
    def total_passif(self) -> Decimal:
        """Total du passif hors résultat de l'exercice"""
        return sum((self.poste(p) for p in POSTES_PASSIF), ZERO)

    @property
    def total_passif_resultat(self) -> Decimal:
        return self.total_passif + self.resultat

    @property
    def ecart_equation(self) -> Decimal:
        return self.total_actif - self.total_passif - self.resultat


def affecter(classe: Optional[int], rubrique: str, net: Decimal) -> Optional[Tuple[str, str]]:
    """(côté, poste) d'un compte de bilan, None pour un compte hors bilan"""
    if rubrique in AFFECTATION_FIXE:
        return AFFECTATION_FIXE[rubrique]
    if classe == 4:
        return (ACTIF, 'creances') if net > 0 else (PASSIF, 'dettes')
    if classe == 5:
        return (ACTIF, 'tresorerie_actif') if net >= 0 else (PASSIF, 'tresorerie_passif')
    return None


def deriver_bilan(plan: PlanComptable, cumuls: Dict[object, Solde]) -> Bilan:
    """
    Bilan à partir des soldes cumulés (accumuler sur Plage.jusqu_au).

    Montants à l'actif : net ; montants au passif : -net.
    Les comptes non classés sont exclus.
    """
    postes = {poste: ZERO for poste in POSTES_ACTIF + POSTES_PASSIF}
    lignes: List[LigneBilan] = []
    resultat = ZERO

    for compte_id, solde in cumuls.items():
        classement = plan.classement(compte_id)
        if not classement.est_classe:
            continue

        if classement.classe in (6, 7, 8):
            resultat -= solde.net
            continue

        affectation = affecter(classement.classe, classement.rubrique, solde.net)
        if affectation is None or solde.net == ZERO:
            continue

        cote, poste = affectation
        montant = solde.net if cote == ACTIF else -solde.net
        postes[poste] += montant

        compte = plan.compte(compte_id)
        lignes.append(LigneBilan(compte_id, compte.code, compte.libelle, cote, poste, montant))

    lignes.sort(key=lambda l: l.code)
    return Bilan(lignes=tuple(lignes), postes=postes, resultat=resultat)
