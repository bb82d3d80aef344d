# apps/accounting/moteur/etats/balance.py
"""
Balance générale à six colonnes

Pour chaque compte mouvementé :
- solde d'ouverture (débit / crédit) : cumul antérieur au début de période
- mouvements de la période (débit / crédit bruts)
- solde de clôture (débit / crédit) : ouverture + période

Les comptes non classés restent dans la balance, signalés.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..exceptions import CompteNonClasse
from ..plan_comptable import PlanComptable
from ..soldes import Plage, accumuler, ventiler
from ..types import ZERO, LigneComptabilisee, Solde


@dataclass(frozen=True)
class LigneBalance:
    compte_id: Any
    code: str
    libelle: str
    classe: Optional[int]
    rubrique: str
    debit_initial: Decimal = ZERO
    credit_initial: Decimal = ZERO
    mouvement_debit: Decimal = ZERO
    mouvement_credit: Decimal = ZERO
    debit_final: Decimal = ZERO
    credit_final: Decimal = ZERO
    est_classe: bool = True

    @property
    def est_nulle(self) -> bool:
        return not any((
            self.debit_initial, self.credit_initial,
            self.mouvement_debit, self.mouvement_credit,
            self.debit_final, self.credit_final,
        ))


@dataclass(frozen=True)
class TotauxBalance:
    debit_initial: Decimal = ZERO
    credit_initial: Decimal = ZERO
    mouvement_debit: Decimal = ZERO
    mouvement_credit: Decimal = ZERO
    debit_final: Decimal = ZERO
    credit_final: Decimal = ZERO

    def __add__(self, ligne) -> 'TotauxBalance':
        return TotauxBalance(
            self.debit_initial + ligne.debit_initial,
            self.credit_initial + ligne.credit_initial,
            self.mouvement_debit + ligne.mouvement_debit,
            self.mouvement_credit + ligne.mouvement_credit,
            self.debit_final + ligne.debit_final,
            self.credit_final + ligne.credit_final,
        )


@dataclass(frozen=True)
class BalanceGenerale:
    debut: date
    fin: date
    lignes: Tuple[LigneBalance, ...]
    totaux: TotauxBalance
    avertissements: Tuple[CompteNonClasse, ...] = ()
    tolerance: Decimal = ZERO

    @property
    def ecart(self) -> Decimal:
        return self.totaux.debit_final - self.totaux.credit_final

    @property
    def equilibree(self) -> bool:
        """Contrôle global du grand livre : total débit final == total crédit final"""
        return abs(self.ecart) <= self.tolerance

    def par_classe(self) -> Dict[Optional[int], TotauxBalance]:
        """Sous-totaux par classe OHADA"""
        sous_totaux: Dict[Optional[int], TotauxBalance] = {}
        for ligne in self.lignes:
            sous_totaux[ligne.classe] = sous_totaux.get(ligne.classe, TotauxBalance()) + ligne
        return sous_totaux


def balance_generale(plan: PlanComptable, lignes: Iterable[LigneComptabilisee], debut: date, fin: date,
                     devise: Optional[str] = None, tolerance: Decimal = ZERO) -> BalanceGenerale:
    lignes = list(lignes)
    initiaux = accumuler(lignes, Plage.avant(debut), devise)
    periode = accumuler(lignes, Plage.entre(debut, fin), devise)

    resultat: List[LigneBalance] = []
    for compte_id in set(initiaux) | set(periode):
        initial = initiaux.get(compte_id, Solde())
        mouvement = periode.get(compte_id, Solde())
        compte = plan.compte(compte_id)
        classement = plan.classement(compte_id)

        debit_initial, credit_initial = ventiler(initial.net)
        debit_final, credit_final = ventiler(initial.net + mouvement.net)

        ligne = LigneBalance(
            compte_id=compte_id,
            code=compte.code,
            libelle=compte.libelle,
            classe=classement.classe,
            rubrique=classement.rubrique,
            debit_initial=debit_initial,
            credit_initial=credit_initial,
            mouvement_debit=mouvement.debit,
            mouvement_credit=mouvement.credit,
            debit_final=debit_final,
            credit_final=credit_final,
            est_classe=classement.est_classe,
        )
        if not ligne.est_nulle:
            resultat.append(ligne)

    resultat.sort(key=lambda l: l.code)

    totaux = TotauxBalance()
    for ligne in resultat:
        totaux = totaux + ligne

    return BalanceGenerale(
        debut=debut,
        fin=fin,
        lignes=tuple(resultat),
        totaux=totaux,
        avertissements=tuple(plan.avertissements(l.compte_id for l in resultat)),
        tolerance=tolerance,
    )
