# apps/accounting/tests/test_moteur_etats.py
"""
Tests des états dérivés du grand livre : balance générale, grand livre,
journaux, balance des tiers, SIG, TFT, bilan et contrôles croisés
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.accounting.moteur.etats import (
    balance_generale, balance_tiers, controler, deriver_etats_financiers, deriver_sig,
    grand_livre, journal_auxiliaire, livre_tresorerie,
)
from apps.accounting.moteur.exceptions import CompteNonClasse, EcartDeControle, ParametreInvalide
from apps.accounting.moteur.plan_comptable import PlanComptable
from apps.accounting.moteur.types import (
    BROUILLON, VALIDEE, Compte, ContexteSociete, LigneComptabilisee, Solde, Tiers,
)

CONTEXTE = ContexteSociete(tenant='societe_test', devise_base='XAF')

CAPITAL, BANQUE, CAISSE, ACHATS, VENTES, FOURNISSEURS, CLIENTS, MATERIEL, PERSONNEL, HORS_NOMENCLATURE = range(1, 11)
JOURNAL_BQ, JOURNAL_CA, JOURNAL_AC, JOURNAL_VT = range(1, 5)

DEBUT = date(2024, 1, 1)
FIN = date(2024, 1, 31)


def plan_de_test():
    return PlanComptable([
        Compte(id=CAPITAL, code='101000', libelle='Capital social'),
        Compte(id=BANQUE, code='521000', libelle='Banque'),
        Compte(id=CAISSE, code='571000', libelle='Caisse'),
        Compte(id=ACHATS, code='601000', libelle='Achats de marchandises'),
        Compte(id=VENTES, code='701000', libelle='Ventes de marchandises'),
        Compte(id=FOURNISSEURS, code='401100', libelle='Fournisseurs'),
        Compte(id=CLIENTS, code='411100', libelle='Clients'),
        Compte(id=MATERIEL, code='241000', libelle='Matériel'),
        Compte(id=PERSONNEL, code='661000', libelle='Rémunérations'),
        Compte(id=HORS_NOMENCLATURE, code='740000', libelle='Compte hors nomenclature'),
    ])


def ecriture(ecriture_id, numero, jour, journal_id, *mouvements, statut=VALIDEE):
    """mouvements : (compte_id, débit, crédit[, tiers_id])"""
    lignes = []
    for mouvement in mouvements:
        compte_id, debit, credit = mouvement[:3]
        tiers_id = mouvement[3] if len(mouvement) > 3 else None
        lignes.append(LigneComptabilisee(
            compte_id=compte_id, date=jour, numero=numero,
            debit=Decimal(debit), credit=Decimal(credit),
            journal_id=journal_id, tiers_id=tiers_id, statut=statut,
            ecriture_id=ecriture_id, reference=numero,
        ))
    return lignes


def grand_livre_de_test():
    return (
        # Apport en capital, avant la période
        ecriture(1, 'BQ230001', date(2023, 12, 15), JOURNAL_BQ, (BANQUE, '1000000', '0'), (CAPITAL, '0', '1000000'))
        + ecriture(2, 'CA240001', date(2024, 1, 5), JOURNAL_CA, (CAISSE, '300000', '0'), (VENTES, '0', '300000'))
        + ecriture(3, 'AC240001', date(2024, 1, 10), JOURNAL_AC,
                   (ACHATS, '120000', '0'), (FOURNISSEURS, '0', '120000', 2))
        + ecriture(4, 'VT240001', date(2024, 1, 12), JOURNAL_VT,
                   (CLIENTS, '200000', '0', 1), (VENTES, '0', '200000'))
        + ecriture(5, 'BQ240001', date(2024, 1, 20), JOURNAL_BQ,
                   (FOURNISSEURS, '80000', '0', 2), (BANQUE, '0', '80000'))
        + ecriture(6, 'BQ240002', date(2024, 1, 25), JOURNAL_BQ, (MATERIEL, '150000', '0'), (BANQUE, '0', '150000'))
        + ecriture(7, 'BQ240003', date(2024, 1, 28), JOURNAL_BQ, (PERSONNEL, '50000', '0'), (BANQUE, '0', '50000'))
        # Brouillon : absent de tous les états
        + ecriture(8, 'BQ240004', date(2024, 1, 29), JOURNAL_BQ, (ACHATS, '999', '0'), (BANQUE, '0', '999'),
                   statut=BROUILLON)
    )


class BalanceGeneraleTestCase(SimpleTestCase):

    def test_balance_a_six_colonnes(self):
        balance = balance_generale(plan_de_test(), grand_livre_de_test(), DEBUT, FIN)

        banque = next(l for l in balance.lignes if l.compte_id == BANQUE)
        self.assertEqual(banque.debit_initial, Decimal('1000000'))
        self.assertEqual(banque.mouvement_credit, Decimal('280000'))
        self.assertEqual(banque.debit_final, Decimal('720000'))
        self.assertEqual(banque.credit_final, Decimal('0'))

        capital = next(l for l in balance.lignes if l.compte_id == CAPITAL)
        self.assertEqual(capital.credit_initial, Decimal('1000000'))
        self.assertEqual(capital.mouvement_debit, Decimal('0'))

        self.assertTrue(balance.equilibree)
        self.assertEqual(balance.totaux.debit_final, balance.totaux.credit_final)
        self.assertEqual(balance.totaux.mouvement_debit, Decimal('900000'))
        self.assertEqual([l.code for l in balance.lignes], sorted(l.code for l in balance.lignes))

    def test_trois_ecritures_quatre_comptes(self):
        plan = PlanComptable([
            Compte(id=1, code='521000'), Compte(id=2, code='701000'),
            Compte(id=3, code='601000'), Compte(id=4, code='401000'),
        ])
        lignes = (
            ecriture(1, 'OD240001', date(2024, 3, 1), 1, (1, '1000', '0'), (2, '0', '1000'))
            + ecriture(2, 'OD240002', date(2024, 3, 2), 1, (3, '400', '0'), (4, '0', '400'))
            + ecriture(3, 'OD240003', date(2024, 3, 3), 1, (4, '250', '0'), (1, '0', '250'))
        )

        balance = balance_generale(plan, lignes, date(2024, 3, 1), date(2024, 3, 31))

        self.assertEqual(len(balance.lignes), 4)
        self.assertEqual(balance.totaux.debit_final, Decimal('1150'))
        self.assertEqual(balance.totaux.credit_final, Decimal('1150'))
        self.assertEqual(balance.ecart, Decimal('0'))

    def test_sous_totaux_par_classe(self):
        balance = balance_generale(plan_de_test(), grand_livre_de_test(), DEBUT, FIN)
        classes = balance.par_classe()
        self.assertEqual(classes[7].credit_final, Decimal('500000'))
        self.assertEqual(classes[5].debit_final, Decimal('1020000'))

    def test_compte_non_classe_signale(self):
        lignes = grand_livre_de_test() + ecriture(
            9, 'OD240001', date(2024, 1, 30), JOURNAL_BQ,
            (BANQUE, '10000', '0'), (HORS_NOMENCLATURE, '0', '10000'),
        )
        balance = balance_generale(plan_de_test(), lignes, DEBUT, FIN)

        self.assertTrue(balance.equilibree)
        ligne = next(l for l in balance.lignes if l.compte_id == HORS_NOMENCLATURE)
        self.assertFalse(ligne.est_classe)
        self.assertEqual([a.code_compte for a in balance.avertissements], ['740000'])


class LivresTestCase(SimpleTestCase):

    def test_grand_livre_solde_progressif(self):
        livre = grand_livre(plan_de_test(), grand_livre_de_test(), DEBUT, FIN, compte_ids=[BANQUE])

        self.assertEqual(len(livre), 1)
        banque = livre[0]
        self.assertEqual(banque.solde_initial, Decimal('1000000'))
        self.assertEqual([m.ligne.numero for m in banque.mouvements], ['BQ240001', 'BQ240002', 'BQ240003'])
        self.assertEqual(
            [m.solde for m in banque.mouvements],
            [Decimal('920000'), Decimal('770000'), Decimal('720000')],
        )
        self.assertEqual(banque.total_credit, Decimal('280000'))
        self.assertEqual(banque.solde_final, Decimal('720000'))

    def test_grand_livre_omet_les_comptes_sans_solde(self):
        livre = grand_livre(plan_de_test(), grand_livre_de_test(), DEBUT, FIN)
        codes = [c.compte.code for c in livre]
        self.assertNotIn('740000', codes)
        self.assertEqual(codes, sorted(codes))

    def test_livre_de_caisse(self):
        livre = livre_tresorerie(plan_de_test(), grand_livre_de_test(), DEBUT, FIN, nature='caisse')
        self.assertEqual([c.compte.code for c in livre], ['571000'])
        self.assertEqual(livre[0].solde_final, Decimal('300000'))

    def test_livre_tresorerie_nature_inconnue(self):
        with self.assertRaises(ParametreInvalide):
            livre_tresorerie(plan_de_test(), grand_livre_de_test(), DEBUT, FIN, nature='clients')

    def test_journal_auxiliaire(self):
        journal = journal_auxiliaire(grand_livre_de_test(), JOURNAL_BQ, DEBUT, FIN)

        self.assertEqual([e.numero for e in journal.ecritures], ['BQ240001', 'BQ240002', 'BQ240003'])
        self.assertEqual(journal.total_debit, Decimal('280000'))
        self.assertEqual(journal.total_credit, Decimal('280000'))
        for ecriture_journal in journal.ecritures:
            self.assertEqual(ecriture_journal.total_debit, ecriture_journal.total_credit)

    def test_balance_tiers(self):
        tiers = [Tiers(id=1, code='CLOC00001', nom='Client A'), Tiers(id=2, code='FLOC00001', nom='Fournisseur B')]

        clients = balance_tiers(plan_de_test(), tiers, grand_livre_de_test(), DEBUT, FIN, 'clients')
        self.assertEqual(len(clients), 1)
        self.assertEqual(clients[0].nom, 'Client A')
        self.assertEqual(clients[0].solde, Decimal('200000'))

        fournisseurs = balance_tiers(plan_de_test(), tiers, grand_livre_de_test(), DEBUT, FIN)
        self.assertEqual(fournisseurs[0].debit, Decimal('80000'))
        self.assertEqual(fournisseurs[0].credit, Decimal('120000'))
        self.assertEqual(fournisseurs[0].solde, Decimal('-40000'))

    def test_balance_tiers_rubrique_inconnue(self):
        with self.assertRaises(ParametreInvalide):
            balance_tiers(plan_de_test(), [], grand_livre_de_test(), DEBUT, FIN, 'banque')


class EtatsFinanciersTestCase(SimpleTestCase):
    """SIG, TFT et bilan dérivés du même grand livre"""

    def setUp(self):
        self.etats = deriver_etats_financiers(CONTEXTE, plan_de_test(), grand_livre_de_test(), DEBUT, FIN)

    def test_soldes_intermediaires_de_gestion(self):
        sig = self.etats.sig
        self.assertEqual(sig.chiffre_affaires, Decimal('500000'))
        self.assertEqual(sig.marge_commerciale, Decimal('380000'))
        self.assertEqual(sig.valeur_ajoutee, Decimal('380000'))
        self.assertEqual(sig.excedent_brut_exploitation, Decimal('330000'))
        self.assertEqual(sig.resultat_net, Decimal('330000'))
        self.assertEqual(sig.total_produits - sig.total_charges, sig.resultat_net)

    def test_resultat_net_sig_egal_tft(self):
        self.assertEqual(self.etats.tft.resultat_net, self.etats.sig.resultat_net)
        self.assertEqual(self.etats.tft.formation.chiffre_affaires, Decimal('500000'))

    def test_flux_de_tresorerie(self):
        tft = self.etats.tft
        self.assertEqual(tft.flux.capacite_autofinancement, Decimal('330000'))
        self.assertEqual(tft.flux.variation_creances, Decimal('-200000'))
        self.assertEqual(tft.flux.variation_dettes, Decimal('40000'))
        self.assertEqual(tft.flux.flux_investissement, Decimal('-150000'))
        self.assertEqual(tft.tresorerie_ouverture, Decimal('1000000'))
        self.assertEqual(tft.tresorerie_cloture, Decimal('1020000'))
        self.assertEqual(tft.flux.flux_total, tft.variation_tresorerie)

    def test_equation_du_bilan(self):
        bilan = self.etats.bilan
        self.assertEqual(bilan.total_actif, Decimal('1370000'))
        self.assertEqual(bilan.total_passif, Decimal('1040000'))
        self.assertEqual(bilan.resultat, Decimal('330000'))
        self.assertEqual(bilan.total_actif - bilan.total_passif, self.etats.resultat_cumule.resultat_net)
        self.assertEqual(bilan.ecart_equation, Decimal('0'))
        self.assertEqual(bilan.poste('dettes'), Decimal('40000'))
        self.assertEqual(bilan.poste('creances'), Decimal('200000'))

    def test_etats_coherents(self):
        self.assertTrue(self.etats.est_coherent)
        self.assertEqual(self.etats.avertissements, ())

    def _controler_avec_resultat_tft(self, resultat_net):
        tft = replace(self.etats.tft, formation=replace(self.etats.tft.formation, resultat_net=resultat_net))
        return controler(CONTEXTE, self.etats.sig, tft, self.etats.bilan, self.etats.resultat_cumule)

    def test_resultat_tft_divergent(self):
        ecarts = self._controler_avec_resultat_tft(Decimal('320000'))

        self.assertEqual(len(ecarts), 1)
        self.assertIsInstance(ecarts[0], EcartDeControle)
        self.assertEqual(ecarts[0].controle, 'sig_tft')
        self.assertEqual(ecarts[0].attendu, Decimal('330000'))
        self.assertEqual(ecarts[0].obtenu, Decimal('320000'))
        self.assertEqual(ecarts[0].ecart, Decimal('-10000'))

    def test_resultat_tft_dans_la_tolerance(self):
        self.assertEqual(self._controler_avec_resultat_tft(Decimal('330000.01')), [])

    def test_compte_non_classe_exclu_et_signale(self):
        lignes = grand_livre_de_test() + ecriture(
            9, 'OD240001', date(2024, 1, 30), JOURNAL_BQ,
            (BANQUE, '10000', '0'), (HORS_NOMENCLATURE, '0', '10000'),
        )

        etats = deriver_etats_financiers(CONTEXTE, plan_de_test(), lignes, DEBUT, FIN)

        # Le produit hors nomenclature n'entre ni dans le SIG ni dans le TFT
        self.assertEqual(etats.sig.resultat_net, Decimal('330000'))
        self.assertEqual(etats.tft.resultat_net, Decimal('330000'))
        self.assertFalse(etats.est_coherent)

        non_classes = [a for a in etats.avertissements if isinstance(a, CompteNonClasse)]
        self.assertEqual([a.code_compte for a in non_classes], ['740000'])

        ecarts = {a.controle: a for a in etats.avertissements if isinstance(a, EcartDeControle)}
        self.assertNotIn('sig_tft', ecarts)
        self.assertEqual(ecarts['equation_bilan'].ecart, Decimal('10000'))
        self.assertEqual(ecarts['tresorerie'].ecart, Decimal('-10000'))

    def test_grand_livre_equilibre(self):
        lignes = [l for l in grand_livre_de_test() if l.statut == VALIDEE]
        self.assertEqual(sum(l.debit for l in lignes), sum(l.credit for l in lignes))


class CessionImmobilisationTestCase(SimpleTestCase):
    """81 : valeur comptable sortie, présentée en charge HAO ; 82 : prix de cession"""

    def setUp(self):
        self.plan = PlanComptable([
            Compte(id=1, code='811000', libelle='Valeurs comptables des cessions'),
            Compte(id=2, code='821000', libelle='Produits des cessions'),
        ])

    def test_valeur_comptable_en_charges_hao(self):
        self.assertEqual(self.plan.classement(1).classe, 8)
        self.assertEqual(self.plan.classement(1).rubrique, 'valeurs_comptables_cessions')

        sig = deriver_sig(self.plan, {1: Solde(debit=Decimal('150000')), 2: Solde(credit=Decimal('200000'))})

        self.assertEqual(sig.poste('charges_hao'), Decimal('150000'))
        self.assertEqual(sig.poste('produits_hao'), Decimal('200000'))
        self.assertEqual(sig.resultat_hao, Decimal('50000'))
        self.assertEqual(sig.resultat_net, Decimal('50000'))

    def test_solde_crediteur_du_81(self):
        sig = deriver_sig(self.plan, {1: Solde(credit=Decimal('30000'))})

        self.assertEqual(sig.poste('charges_hao'), Decimal('-30000'))
        self.assertEqual(sig.resultat_hao, Decimal('30000'))
