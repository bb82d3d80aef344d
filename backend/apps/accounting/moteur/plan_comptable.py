# apps/accounting/moteur/plan_comptable.py
"""
Classement des comptes dans la nomenclature OHADA (SYSCOHADA)

Source unique de vérité pour le rattachement d'un numéro de compte à
sa classe et à sa rubrique. Tous les états (balance, SIG, TFT, bilan)
consomment ce classement ; aucun ne redéfinit ses propres plages.

Le classement se fait par préfixe le plus long : '4431' est rattaché à
la règle '443' (TVA collectée) avant la règle '44' (État).
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .exceptions import CompteNonClasse
from .types import Compte

NON_CLASSE = 'non_classe'

LIBELLES_CLASSES = {
    1: "Ressources durables",
    2: "Actif immobilisé",
    3: "Stocks",
    4: "Tiers",
    5: "Trésorerie",
    6: "Charges des activités ordinaires",
    7: "Produits des activités ordinaires",
    8: "Autres charges et autres produits",
    9: "Comptes des engagements hors bilan",
}

# (préfixe, rubrique, libellé) - l'ordre n'a pas d'importance,
# la recherche retient toujours le préfixe le plus long
REGLES_OHADA = (
    # Classe 1
    ('10', 'capitaux_propres', "Capital"),
    ('11', 'capitaux_propres', "Réserves"),
    ('12', 'capitaux_propres', "Report à nouveau"),
    ('13', 'capitaux_propres', "Résultat net de l'exercice"),
    ('14', 'capitaux_propres', "Subventions d'investissement"),
    ('15', 'capitaux_propres', "Provisions réglementées"),
    ('16', 'dettes_financieres', "Emprunts et dettes assimilées"),
    ('17', 'dettes_financieres', "Dettes de location-acquisition"),
    ('18', 'dettes_financieres', "Dettes liées à des participations"),
    ('19', 'provisions_financieres', "Provisions pour risques et charges"),

    # Classe 2
    ('20', 'immobilisations', "Charges immobilisées"),
    ('21', 'immobilisations', "Immobilisations incorporelles"),
    ('22', 'immobilisations', "Terrains"),
    ('23', 'immobilisations', "Bâtiments, installations et agencements"),
    ('24', 'immobilisations', "Matériel"),
    ('25', 'immobilisations', "Avances et acomptes sur immobilisations"),
    ('26', 'immobilisations_financieres', "Titres de participation"),
    ('27', 'immobilisations_financieres', "Autres immobilisations financières"),
    ('28', 'amortissements', "Amortissements"),
    ('29', 'depreciations_immobilisations', "Dépréciations des immobilisations"),

    # Classe 3
    ('31', 'stocks', "Marchandises"),
    ('32', 'stocks', "Matières premières"),
    ('33', 'stocks', "Autres approvisionnements"),
    ('34', 'stocks', "Produits en cours"),
    ('35', 'stocks', "Services en cours"),
    ('36', 'stocks', "Produits finis"),
    ('37', 'stocks', "Produits intermédiaires et résiduels"),
    ('38', 'stocks', "Stocks en cours de route"),
    ('39', 'depreciations_stocks', "Dépréciations des stocks"),

    # Classe 4
    ('40', 'fournisseurs', "Fournisseurs et comptes rattachés"),
    ('41', 'clients', "Clients et comptes rattachés"),
    ('42', 'personnel', "Personnel"),
    ('43', 'organismes_sociaux', "Organismes sociaux"),
    ('44', 'etat', "État et collectivités publiques"),
    ('443', 'tva_collectee', "État, TVA facturée"),
    ('445', 'tva_deductible', "État, TVA récupérable"),
    ('45', 'organismes_internationaux', "Organismes internationaux"),
    ('46', 'associes', "Associés et groupe"),
    ('47', 'debiteurs_crediteurs_divers', "Débiteurs et créditeurs divers"),
    ('48', 'creances_dettes_hao', "Créances et dettes hors activités ordinaires"),
    ('49', 'depreciations_tiers', "Dépréciations des comptes de tiers"),

    # Classe 5
    ('50', 'titres_placement', "Titres de placement"),
    ('51', 'valeurs_a_encaisser', "Valeurs à encaisser"),
    ('52', 'banque', "Banques"),
    ('53', 'etablissements_financiers', "Établissements financiers"),
    ('54', 'instruments_tresorerie', "Instruments de trésorerie"),
    ('56', 'credits_tresorerie', "Banques, crédits de trésorerie"),
    ('57', 'caisse', "Caisse"),
    ('58', 'virements_internes', "Régies d'avances et virements internes"),
    ('59', 'depreciations_tresorerie', "Dépréciations des titres et valeurs"),

    # Classe 6
    ('601', 'achats_marchandises', "Achats de marchandises"),
    ('602', 'matieres_premieres', "Achats de matières premières"),
    ('603', 'variation_stocks', "Variations des stocks de biens achetés"),
    ('6031', 'variation_stocks_marchandises', "Variations des stocks de marchandises"),
    ('604', 'autres_achats', "Achats stockés de matières et fournitures"),
    ('605', 'autres_achats', "Autres achats"),
    ('608', 'autres_achats', "Achats d'emballages"),
    ('609', 'rabais_obtenus', "Rabais, remises et ristournes obtenus"),
    ('61', 'transports', "Transports"),
    ('62', 'services_exterieurs_a', "Services extérieurs A"),
    ('63', 'services_exterieurs_b', "Services extérieurs B"),
    ('64', 'impots_taxes', "Impôts et taxes"),
    ('65', 'autres_charges', "Autres charges"),
    ('66', 'charges_personnel', "Charges de personnel"),
    ('67', 'frais_financiers', "Frais financiers et charges assimilées"),
    ('68', 'dotations_amortissements', "Dotations aux amortissements"),
    ('69', 'dotations_provisions', "Dotations aux provisions"),

    # Classe 7
    ('701', 'ventes_marchandises', "Ventes de marchandises"),
    ('702', 'production_vendue', "Ventes de produits finis"),
    ('703', 'production_vendue', "Ventes de produits intermédiaires"),
    ('704', 'production_vendue', "Ventes de produits résiduels"),
    ('705', 'production_vendue', "Travaux facturés"),
    ('706', 'production_vendue', "Services vendus"),
    ('707', 'production_vendue', "Produits accessoires"),
    ('71', 'subventions_exploitation', "Subventions d'exploitation"),
    ('72', 'production_immobilisee', "Production immobilisée"),
    ('73', 'production_stockee', "Variations des stocks de biens et services produits"),
    ('75', 'autres_produits', "Autres produits"),
    ('77', 'revenus_financiers', "Revenus financiers et produits assimilés"),
    ('78', 'reprises_provisions', "Reprises de provisions"),
    ('79', 'transferts_charges', "Transferts de charges"),

    # Classe 8
    ('81', 'valeurs_comptables_cessions', "Valeurs comptables des cessions d'immobilisations"),
    ('82', 'produits_cessions', "Produits des cessions d'immobilisations"),
    ('83', 'charges_hao', "Charges hors activités ordinaires"),
    ('84', 'produits_hao', "Produits hors activités ordinaires"),
    ('85', 'dotations_hao', "Dotations hors activités ordinaires"),
    ('86', 'reprises_hao', "Reprises hors activités ordinaires"),
    ('87', 'participation', "Participation des travailleurs"),
    ('88', 'subventions_equilibre', "Subventions d'équilibre"),
    ('89', 'impots_resultat', "Impôts sur le résultat"),

    # Classe 9
    ('9', 'hors_bilan', "Engagements hors bilan"),
)


@dataclass(frozen=True)
class Classement:
    classe: Optional[int]
    rubrique: str
    libelle: str = ''
    prefixe: str = ''

    @property
    def est_classe(self) -> bool:
        return self.rubrique != NON_CLASSE


_INDEX: Dict[str, Classement] = {}
for _prefixe, _rubrique, _libelle in REGLES_OHADA:
    _INDEX[_prefixe] = Classement(int(_prefixe[0]), _rubrique, _libelle, _prefixe)

_LONGUEUR_MAX = max(len(prefixe) for prefixe in _INDEX)


def classer(code: str) -> Classement:
    """
    Retourne le classement OHADA d'un numéro de compte.

    Un code sans règle correspondante est NON_CLASSE ; sa classe est
    conservée si le premier caractère est un chiffre de 1 à 9, afin
    que la balance puisse encore le regrouper.
    """
    code = (code or '').strip()
    for longueur in range(min(len(code), _LONGUEUR_MAX), 0, -1):
        classement = _INDEX.get(code[:longueur])
        if classement is not None:
            return classement

    classe = int(code[0]) if code[:1].isdigit() and code[0] != '0' else None
    return Classement(classe, NON_CLASSE, "Compte non classé")


def rubriques_de_classe(classe: int) -> List[str]:
    """Rubriques connues d'une classe, dans l'ordre de la nomenclature"""
    vues = []
    for prefixe, rubrique, _ in REGLES_OHADA:
        if prefixe.startswith(str(classe)) and rubrique not in vues:
            vues.append(rubrique)
    return vues


def code_normalise(code: str, longueur: int = 6) -> str:
    """Code ramené à une longueur fixe pour les comparaisons de plages"""
    code = (code or '').strip()
    return code[:longueur].ljust(longueur, '0')


class PlanComptable:
    """
    Plan comptable d'une société : comptes indexés par id
    et classement pré-calculé.
    """

    def __init__(self, comptes: Iterable[Compte]):
        self._comptes: Dict = {}
        self._classements: Dict = {}
        for compte in comptes:
            self._comptes[compte.id] = compte
            self._classements[compte.id] = classer(compte.code)

    def __len__(self):
        return len(self._comptes)

    def __iter__(self):
        return iter(sorted(self._comptes.values(), key=lambda c: c.code))

    def __contains__(self, compte_id):
        return compte_id in self._comptes

    def compte(self, compte_id) -> Compte:
        compte = self._comptes.get(compte_id)
        if compte is None:
            # Ligne sur un compte absent de l'instantané : on la garde visible
            return Compte(id=compte_id, code=f"?{compte_id}", libelle="Compte inconnu")
        return compte

    def classement(self, compte_id) -> Classement:
        classement = self._classements.get(compte_id)
        if classement is None:
            return classer(self.compte(compte_id).code)
        return classement

    def par_code(self, code: str) -> Optional[Compte]:
        for compte in self._comptes.values():
            if compte.code == code:
                return compte
        return None

    def comptes_de(self, *rubriques: str) -> List[Compte]:
        return [c for c in self if self._classements[c.id].rubrique in rubriques]

    def non_classes(self) -> List[Compte]:
        return [c for c in self if not self._classements[c.id].est_classe]

    def avertissements(self, compte_ids: Iterable) -> List[CompteNonClasse]:
        """Un avertissement par compte non classé parmi ceux fournis"""
        avertissements = []
        for compte_id in sorted(set(compte_ids), key=lambda i: self.compte(i).code):
            if not self.classement(compte_id).est_classe:
                avertissements.append(CompteNonClasse.pour(compte_id, self.compte(compte_id).code))
        return avertissements
