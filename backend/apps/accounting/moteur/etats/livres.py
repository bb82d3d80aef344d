# apps/accounting/moteur/etats/livres.py
"""
Livres comptables : grand livre, journaux auxiliaires,
livre de caisse et de banque, balance des tiers
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..exceptions import ParametreInvalide
from ..plan_comptable import PlanComptable
from ..soldes import Plage, accumuler, solde_progressif, trier_lignes
from ..types import ZERO, VALIDEE, Compte, LigneComptabilisee, Solde, Tiers

RUBRIQUES_TRESORERIE = ('banque', 'caisse')


@dataclass(frozen=True)
class MouvementGrandLivre:
    ligne: LigneComptabilisee
    debit: Decimal
    credit: Decimal
    solde: Decimal


@dataclass(frozen=True)
class CompteGrandLivre:
    compte: Compte
    solde_initial: Decimal
    mouvements: Tuple[MouvementGrandLivre, ...]
    total_debit: Decimal
    total_credit: Decimal

    @property
    def solde_final(self) -> Decimal:
        return self.solde_initial + self.total_debit - self.total_credit


def grand_livre(plan: PlanComptable, lignes: Iterable[LigneComptabilisee], debut: date, fin: date,
                compte_ids: Optional[Iterable] = None, devise: Optional[str] = None) -> List[CompteGrandLivre]:
    """
    Grand livre par compte : solde d'ouverture puis lignes de la période
    avec solde progressif. Un compte sans solde d'ouverture ni mouvement
    n'apparaît pas.
    """
    lignes = list(lignes)
    filtre = set(compte_ids) if compte_ids is not None else None
    if filtre is not None:
        lignes = [l for l in lignes if l.compte_id in filtre]

    initiaux = accumuler(lignes, Plage.avant(debut), devise)
    plage = Plage.entre(debut, fin)

    comptes = []
    for compte_id in set(initiaux) | {l.compte_id for l in lignes if plage.contient(l.date)}:
        solde_initial = initiaux.get(compte_id, Solde()).net
        progression = solde_progressif(lignes, compte_id, solde_initial, plage, devise)
        if not progression and solde_initial == ZERO:
            continue

        mouvements = []
        total_debit = total_credit = ZERO
        for ligne, cumul in progression:
            if devise is None:
                debit, credit = ligne.debit_base, ligne.credit_base
            else:
                debit, credit = ligne.debit, ligne.credit
            total_debit += debit
            total_credit += credit
            mouvements.append(MouvementGrandLivre(ligne, debit, credit, cumul))

        comptes.append(CompteGrandLivre(
            compte=plan.compte(compte_id),
            solde_initial=solde_initial,
            mouvements=tuple(mouvements),
            total_debit=total_debit,
            total_credit=total_credit,
        ))

    comptes.sort(key=lambda c: c.compte.code)
    return comptes


def livre_tresorerie(plan: PlanComptable, lignes: Iterable[LigneComptabilisee], debut: date, fin: date,
                     nature: Optional[str] = None, devise: Optional[str] = None) -> List[CompteGrandLivre]:
    """Grand livre restreint aux comptes de banque (52) et de caisse (57)"""
    rubriques = (nature,) if nature else RUBRIQUES_TRESORERIE
    if any(r not in RUBRIQUES_TRESORERIE for r in rubriques):
        raise ParametreInvalide(f"Nature de trésorerie inconnue : {nature}")

    compte_ids = [c.id for c in plan.comptes_de(*rubriques)]
    return grand_livre(plan, lignes, debut, fin, compte_ids=compte_ids, devise=devise)


@dataclass(frozen=True)
class EcritureJournal:
    ecriture_id: Any
    numero: str
    date: date
    reference: str
    lignes: Tuple[LigneComptabilisee, ...]
    total_debit: Decimal
    total_credit: Decimal


@dataclass(frozen=True)
class JournalAuxiliaire:
    journal_id: Any
    ecritures: Tuple[EcritureJournal, ...]
    total_debit: Decimal
    total_credit: Decimal


def journal_auxiliaire(lignes: Iterable[LigneComptabilisee], journal_id, debut: date,
                       fin: date) -> JournalAuxiliaire:
    """Écritures validées d'un journal sur la période, regroupées par écriture"""
    plage = Plage.entre(debut, fin)
    retenues = [
        l for l in lignes
        if l.journal_id == journal_id and l.statut == VALIDEE and plage.contient(l.date)
    ]

    groupes: Dict[Any, List[LigneComptabilisee]] = {}
    for ligne in trier_lignes(retenues):
        groupes.setdefault(ligne.ecriture_id or ligne.numero, []).append(ligne)

    ecritures = []
    for groupe in groupes.values():
        premiere = groupe[0]
        ecritures.append(EcritureJournal(
            ecriture_id=premiere.ecriture_id,
            numero=premiere.numero,
            date=premiere.date,
            reference=premiere.reference,
            lignes=tuple(groupe),
            total_debit=sum((l.debit_base for l in groupe), ZERO),
            total_credit=sum((l.credit_base for l in groupe), ZERO),
        ))

    return JournalAuxiliaire(
        journal_id=journal_id,
        ecritures=tuple(ecritures),
        total_debit=sum((e.total_debit for e in ecritures), ZERO),
        total_credit=sum((e.total_credit for e in ecritures), ZERO),
    )


@dataclass(frozen=True)
class LigneBalanceTiers:
    cle: Any
    code_compte: str
    nom: str
    debit: Decimal
    credit: Decimal

    @property
    def solde(self) -> Decimal:
        return self.debit - self.credit


def balance_tiers(plan: PlanComptable, tiers: Iterable[Tiers], lignes: Iterable[LigneComptabilisee],
                  debut: date, fin: date, rubrique: str = 'fournisseurs') -> List[LigneBalanceTiers]:
    """
    Mouvements de la période sur les comptes fournisseurs (40) ou
    clients (41), regroupés par tiers. Une ligne sans tiers est
    regroupée sur son compte.
    """
    if rubrique not in ('fournisseurs', 'clients'):
        raise ParametreInvalide(f"Rubrique de tiers inconnue : {rubrique}")

    comptes = {c.id for c in plan.comptes_de(rubrique)}
    noms = {t.id: t.nom for t in tiers}
    plage = Plage.entre(debut, fin)

    cumuls: Dict[Any, List] = {}
    for ligne in lignes:
        if ligne.compte_id not in comptes or ligne.statut != VALIDEE or not plage.contient(ligne.date):
            continue
        compte = plan.compte(ligne.compte_id)
        if ligne.tiers_id is not None:
            cle, nom = ('tiers', ligne.tiers_id), noms.get(ligne.tiers_id, f"Tiers {ligne.tiers_id}")
        else:
            cle, nom = ('compte', ligne.compte_id), f"Compte {compte.code}"

        cumul = cumuls.setdefault(cle, [compte.code, nom, ZERO, ZERO])
        cumul[2] += ligne.debit_base
        cumul[3] += ligne.credit_base

    resultat = [
        LigneBalanceTiers(cle[1], code, nom, debit, credit)
        for cle, (code, nom, debit, credit) in cumuls.items()
    ]
    resultat.sort(key=lambda l: abs(l.solde), reverse=True)
    return resultat
