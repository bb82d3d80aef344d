# apps/accounting/moteur/etats/sig.py
"""
Compte de résultat et soldes intermédiaires de gestion (SIG)

Les comptes des classes 6, 7 et 8 sont regroupés par poste à partir de
leur rubrique OHADA, puis la cascade est calculée dans l'ordre :

1. marge commerciale
2. valeur ajoutée
3. excédent brut d'exploitation
4. résultat d'exploitation
5. résultat financier
6. résultat des activités ordinaires
7. résultat hors activités ordinaires
8. résultat net

Chaque solde se calcule à partir du précédent, jamais des totaux bruts.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict

from ..plan_comptable import PlanComptable
from ..types import ZERO, Solde

# Postes de produits : montant = -net (solde créditeur positif)
POSTES_PRODUITS = {
    'ventes_marchandises': ('ventes_marchandises',),
    'production': ('production_vendue', 'production_immobilisee', 'production_stockee'),
    'subventions': ('subventions_exploitation',),
    'autres_produits': ('autres_produits',),
    'reprises_provisions': ('reprises_provisions',),
    'transferts_charges': ('transferts_charges',),
    'produits_financiers': ('revenus_financiers',),
    'produits_hao': ('produits_cessions', 'produits_hao', 'reprises_hao', 'subventions_equilibre'),
}

# Postes de charges : montant = net (solde débiteur positif)
POSTES_CHARGES = {
    'achats_marchandises': ('achats_marchandises', 'variation_stocks_marchandises', 'rabais_obtenus'),
    'matieres_consommees': ('matieres_premieres', 'variation_stocks', 'autres_achats'),
    'autres_charges_externes': ('transports', 'services_exterieurs_a', 'services_exterieurs_b'),
    'impots_taxes': ('impots_taxes',),
    'autres_charges': ('autres_charges',),
    'charges_personnel': ('charges_personnel',),
    'dotations_amortissements': ('dotations_amortissements', 'dotations_provisions'),
    'charges_financieres': ('frais_financiers',),
    'charges_hao': ('valeurs_comptables_cessions', 'charges_hao', 'dotations_hao'),
    'participation_impots': ('participation', 'impots_resultat'),
}

POSTE_PAR_RUBRIQUE = {}
for _poste, _rubriques in POSTES_PRODUITS.items():
    for _rubrique in _rubriques:
        POSTE_PAR_RUBRIQUE[_rubrique] = (_poste, -1)
for _poste, _rubriques in POSTES_CHARGES.items():
    for _rubrique in _rubriques:
        POSTE_PAR_RUBRIQUE[_rubrique] = (_poste, 1)


@dataclass(frozen=True)
class SIG:
    postes: Dict[str, Decimal] = field(default_factory=dict)
    marge_commerciale: Decimal = ZERO
    valeur_ajoutee: Decimal = ZERO
    excedent_brut_exploitation: Decimal = ZERO
    resultat_exploitation: Decimal = ZERO
    resultat_financier: Decimal = ZERO
    resultat_activites_ordinaires: Decimal = ZERO
    resultat_hao: Decimal = ZERO
    resultat_net: Decimal = ZERO

    def poste(self, nom: str) -> Decimal:
        return self.postes.get(nom, ZERO)

    @property
    def chiffre_affaires(self) -> Decimal:
        return self.poste('ventes_marchandises') + self.poste('production')

    @property
    def total_produits(self) -> Decimal:
        return sum((self.poste(p) for p in POSTES_PRODUITS), ZERO)

    @property
    def total_charges(self) -> Decimal:
        return sum((self.poste(p) for p in POSTES_CHARGES), ZERO)


def regrouper_postes(plan: PlanComptable, soldes: Dict) -> Dict[str, Decimal]:
    """Montant de chaque poste du compte de résultat ; les comptes non classés sont ignorés"""
    postes = {poste: ZERO for poste in list(POSTES_PRODUITS) + list(POSTES_CHARGES)}
    for compte_id, solde in soldes.items():
        affectation = POSTE_PAR_RUBRIQUE.get(plan.classement(compte_id).rubrique)
        if affectation is None:
            continue
        poste, signe = affectation
        postes[poste] += signe * solde.net
    return postes


def cascade(postes: Dict[str, Decimal]) -> SIG:
    def p(nom):
        return postes.get(nom, ZERO)

    marge = p('ventes_marchandises') - p('achats_marchandises')
    valeur_ajoutee = marge + p('production') - (p('matieres_consommees') + p('autres_charges_externes'))
    ebe = valeur_ajoutee + p('subventions') - p('charges_personnel') - p('impots_taxes')
    resultat_exploitation = (
        ebe + p('autres_produits') + p('reprises_provisions') + p('transferts_charges')
        - p('autres_charges') - p('dotations_amortissements')
    )
    resultat_financier = p('produits_financiers') - p('charges_financieres')
    rao = resultat_exploitation + resultat_financier
    resultat_hao = p('produits_hao') - p('charges_hao')
    resultat_net = rao + resultat_hao - p('participation_impots')

    return SIG(
        postes=dict(postes),
        marge_commerciale=marge,
        valeur_ajoutee=valeur_ajoutee,
        excedent_brut_exploitation=ebe,
        resultat_exploitation=resultat_exploitation,
        resultat_financier=resultat_financier,
        resultat_activites_ordinaires=rao,
        resultat_hao=resultat_hao,
        resultat_net=resultat_net,
    )


def deriver_sig(plan: PlanComptable, soldes: Dict[object, Solde]) -> SIG:
    """SIG à partir des soldes de la période (sortie de accumuler)"""
    return cascade(regrouper_postes(plan, soldes))
