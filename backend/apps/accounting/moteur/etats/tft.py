# apps/accounting/moteur/etats/tft.py
"""
Tableau financier des ressources et des emplois (TFT)

Deux parties, toutes deux calculées directement sur des plages de
numéros de comptes (ramenés à six chiffres), indépendamment des postes
du SIG :

- formation du résultat : chiffre d'affaires, valeur ajoutée, EBE,
  résultats d'exploitation, financier, HAO et résultat net. Le résultat
  net doit être identique à celui du SIG ; un écart signale un compte
  mal classé.
- flux de trésorerie : activités opérationnelles, d'investissement et
  de financement, rapprochés de la variation réelle des comptes de
  trésorerie (50 à 58).

Les comptes non classés sont exclus des deux parties.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Tuple

from ..plan_comptable import PlanComptable, code_normalise
from ..types import ZERO, Solde

# (début, fin) inclus, codes sur six chiffres
Plages = Tuple[Tuple[str, str], ...]

CHIFFRE_AFFAIRES: Plages = (('701000', '709999'),)
PRODUCTION_IMMOBILISEE_STOCKEE: Plages = (('720000', '739999'),)
CONSOMMATIONS: Plages = (('601000', '639999'),)
SUBVENTIONS: Plages = (('710000', '719999'),)
IMPOTS_TAXES: Plages = (('640000', '649999'),)
CHARGES_PERSONNEL: Plages = (('660000', '669999'),)
AUTRES_PRODUITS: Plages = (('750000', '759999'),)
REPRISES_TRANSFERTS: Plages = (('780000', '799999'),)
AUTRES_CHARGES: Plages = (('650000', '659999'),)
DOTATIONS: Plages = (('680000', '699999'),)
PRODUITS_FINANCIERS: Plages = (('770000', '779999'),)
CHARGES_FINANCIERES: Plages = (('670000', '679999'),)
PRODUITS_HAO: Plages = (('820000', '829999'), ('840000', '849999'),
                        ('860000', '869999'), ('880000', '889999'))
CHARGES_HAO: Plages = (('810000', '819999'), ('830000', '839999'), ('850000', '859999'))
PARTICIPATION: Plages = (('870000', '879999'),)
IMPOTS_RESULTAT: Plages = (('890000', '899999'),)

# Flux de trésorerie
PROVISIONS_DEPRECIATIONS: Plages = (('190000', '199999'), ('280000', '299999'), ('390000', '399999'),
                                    ('490000', '499999'), ('590000', '599999'))
STOCKS: Plages = (('310000', '389999'),)
TIERS_EXPLOITATION: Plages = (('400000', '459999'), ('470000', '489999'))
IMMOBILISATIONS_CORPORELLES: Plages = (('200000', '259999'),)
IMMOBILISATIONS_FINANCIERES: Plages = (('260000', '279999'),)
CAPITAUX_PROPRES: Plages = (('100000', '159999'),)
EMPRUNTS: Plages = (('160000', '189999'),)
ASSOCIES: Plages = (('460000', '469999'),)
TRESORERIE: Plages = (('500000', '589999'),)


class _Selection:
    """Soldes des comptes classés, interrogeables par plages de codes"""

    def __init__(self, plan: PlanComptable, soldes: Dict[object, Solde]):
        self._soldes = [
            (code_normalise(plan.compte(compte_id).code), solde)
            for compte_id, solde in soldes.items()
            if plan.classement(compte_id).est_classe
        ]

    def soldes(self, plages: Plages) -> Iterable[Solde]:
        for code, solde in self._soldes:
            if any(debut <= code <= fin for debut, fin in plages):
                yield solde

    def net(self, plages: Plages) -> Decimal:
        return sum((s.net for s in self.soldes(plages)), ZERO)

    def debit(self, plages: Plages) -> Decimal:
        return sum((s.debit for s in self.soldes(plages)), ZERO)

    def credit(self, plages: Plages) -> Decimal:
        return sum((s.credit for s in self.soldes(plages)), ZERO)

    def produits(self, plages: Plages) -> Decimal:
        return -self.net(plages)

    def charges(self, plages: Plages) -> Decimal:
        return self.net(plages)


@dataclass(frozen=True)
class FormationResultat:
    chiffre_affaires: Decimal = ZERO
    production_immobilisee_stockee: Decimal = ZERO
    consommations: Decimal = ZERO
    valeur_ajoutee: Decimal = ZERO
    excedent_brut_exploitation: Decimal = ZERO
    resultat_exploitation: Decimal = ZERO
    resultat_financier: Decimal = ZERO
    resultat_hao: Decimal = ZERO
    resultat_net: Decimal = ZERO


@dataclass(frozen=True)
class FluxTresorerie:
    capacite_autofinancement: Decimal = ZERO
    variation_stocks: Decimal = ZERO
    variation_creances: Decimal = ZERO
    variation_dettes: Decimal = ZERO
    acquisitions_immobilisations: Decimal = ZERO
    investissements_financiers: Decimal = ZERO
    cessions_immobilisations: Decimal = ZERO
    apports_capitaux: Decimal = ZERO
    emprunts: Decimal = ZERO
    remboursements: Decimal = ZERO
    comptes_associes: Decimal = ZERO

    @property
    def flux_operationnels(self) -> Decimal:
        return (self.capacite_autofinancement + self.variation_stocks
                + self.variation_creances + self.variation_dettes)

    @property
    def flux_investissement(self) -> Decimal:
        return self.cessions_immobilisations - self.acquisitions_immobilisations - self.investissements_financiers

    @property
    def flux_financement(self) -> Decimal:
        return self.apports_capitaux + self.emprunts - self.remboursements + self.comptes_associes

    @property
    def flux_total(self) -> Decimal:
        return self.flux_operationnels + self.flux_investissement + self.flux_financement


@dataclass(frozen=True)
class TFT:
    formation: FormationResultat = field(default_factory=FormationResultat)
    flux: FluxTresorerie = field(default_factory=FluxTresorerie)
    tresorerie_ouverture: Decimal = ZERO
    tresorerie_cloture: Decimal = ZERO

    @property
    def resultat_net(self) -> Decimal:
        return self.formation.resultat_net

    @property
    def variation_tresorerie(self) -> Decimal:
        return self.tresorerie_cloture - self.tresorerie_ouverture


def former_resultat(selection: _Selection) -> FormationResultat:
    R, D = selection.produits, selection.charges

    chiffre_affaires = R(CHIFFRE_AFFAIRES)
    production = R(PRODUCTION_IMMOBILISEE_STOCKEE)
    consommations = D(CONSOMMATIONS)
    valeur_ajoutee = chiffre_affaires + production - consommations
    ebe = valeur_ajoutee + R(SUBVENTIONS) - D(IMPOTS_TAXES) - D(CHARGES_PERSONNEL)
    resultat_exploitation = (
        ebe + R(AUTRES_PRODUITS) + R(REPRISES_TRANSFERTS)
        - D(AUTRES_CHARGES) - D(DOTATIONS)
    )
    resultat_financier = R(PRODUITS_FINANCIERS) - D(CHARGES_FINANCIERES)
    resultat_hao = R(PRODUITS_HAO) - D(CHARGES_HAO)
    resultat_net = (
        resultat_exploitation + resultat_financier + resultat_hao
        - D(PARTICIPATION) - D(IMPOTS_RESULTAT)
    )

    return FormationResultat(
        chiffre_affaires=chiffre_affaires,
        production_immobilisee_stockee=production,
        consommations=consommations,
        valeur_ajoutee=valeur_ajoutee,
        excedent_brut_exploitation=ebe,
        resultat_exploitation=resultat_exploitation,
        resultat_financier=resultat_financier,
        resultat_hao=resultat_hao,
        resultat_net=resultat_net,
    )


def _tiers_par_sens(plan: PlanComptable, periode: Dict, cloture: Dict) -> Tuple[Decimal, Decimal]:
    """
    Variation des comptes de tiers d'exploitation, répartie selon le sens
    du solde de clôture de chaque compte : débiteur -> créances,
    créditeur -> dettes.
    """
    variation_creances = variation_dettes = ZERO
    for compte_id, solde in periode.items():
        if not plan.classement(compte_id).est_classe:
            continue
        code = code_normalise(plan.compte(compte_id).code)
        if not any(debut <= code <= fin for debut, fin in TIERS_EXPLOITATION):
            continue
        if cloture.get(compte_id, Solde()).net > 0:
            variation_creances -= solde.net
        else:
            variation_dettes -= solde.net
    return variation_creances, variation_dettes


def deriver_tft(plan: PlanComptable, periode: Dict[object, Solde], ouverture: Dict[object, Solde],
                cloture: Dict[object, Solde]) -> TFT:
    """
    TFT de la période.

    `periode` : soldes des mouvements de la période ; `ouverture` : soldes
    antérieurs au début de période ; `cloture` : soldes cumulés à la fin.
    """
    selection = _Selection(plan, periode)
    formation = former_resultat(selection)
    variation_creances, variation_dettes = _tiers_par_sens(plan, periode, cloture)

    flux = FluxTresorerie(
        capacite_autofinancement=formation.resultat_net - selection.net(PROVISIONS_DEPRECIATIONS),
        variation_stocks=-selection.net(STOCKS),
        variation_creances=variation_creances,
        variation_dettes=variation_dettes,
        acquisitions_immobilisations=selection.debit(IMMOBILISATIONS_CORPORELLES),
        investissements_financiers=selection.debit(IMMOBILISATIONS_FINANCIERES),
        cessions_immobilisations=selection.credit(IMMOBILISATIONS_CORPORELLES + IMMOBILISATIONS_FINANCIERES),
        apports_capitaux=-selection.net(CAPITAUX_PROPRES),
        emprunts=selection.credit(EMPRUNTS),
        remboursements=selection.debit(EMPRUNTS),
        comptes_associes=-selection.net(ASSOCIES),
    )

    tresorerie_ouverture = _Selection(plan, ouverture).net(TRESORERIE)
    return TFT(
        formation=formation,
        flux=flux,
        tresorerie_ouverture=tresorerie_ouverture,
        tresorerie_cloture=tresorerie_ouverture + selection.net(TRESORERIE),
    )
