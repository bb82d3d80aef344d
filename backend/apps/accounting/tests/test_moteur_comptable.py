# apps/accounting/tests/test_moteur_comptable.py
"""
Tests du moteur : classement OHADA, contrôle d'équilibre,
comptabilisation et cumul des soldes
"""

from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.accounting.moteur.exceptions import (
    CompteNonClasse, EcritureDesequilibree, LigneInvalide, ParametreInvalide, TransitionInvalide,
)
from apps.accounting.moteur.plan_comptable import (
    NON_CLASSE, PlanComptable, classer, code_normalise, rubriques_de_classe,
)
from apps.accounting.moteur.soldes import Plage, accumuler, solde_progressif, total, ventiler
from apps.accounting.moteur.types import (
    BROUILLON, VALIDEE, Compte, ContexteSociete, Ecriture, LigneComptabilisee, LigneEcriture, Solde,
)
from apps.accounting.moteur.validation import (
    calculer_equilibre, comptabiliser, contrepasser, valider,
)

CONTEXTE = ContexteSociete(tenant='societe_test', devise_base='XAF', tolerance=Decimal('0.01'))


class ClassementOHADATestCase(SimpleTestCase):
    """Rattachement des numéros de comptes aux classes et rubriques"""

    def test_comptes_de_tresorerie(self):
        self.assertEqual(classer('521100').rubrique, 'banque')
        self.assertEqual(classer('521100').classe, 5)
        self.assertEqual(classer('571000').rubrique, 'caisse')
        self.assertEqual(classer('561000').rubrique, 'credits_tresorerie')

    def test_prefixe_le_plus_long(self):
        """'4431' relève de la TVA collectée, pas de la rubrique État"""
        self.assertEqual(classer('4431').rubrique, 'tva_collectee')
        self.assertEqual(classer('4451000').rubrique, 'tva_deductible')
        self.assertEqual(classer('441000').rubrique, 'etat')
        self.assertEqual(classer('6031').rubrique, 'variation_stocks_marchandises')
        self.assertEqual(classer('6032').rubrique, 'variation_stocks')

    def test_produits_et_charges(self):
        self.assertEqual(classer('701000').rubrique, 'ventes_marchandises')
        self.assertEqual(classer('706000').rubrique, 'production_vendue')
        self.assertEqual(classer('601000').rubrique, 'achats_marchandises')
        self.assertEqual(classer('661000').rubrique, 'charges_personnel')

    def test_compte_hors_nomenclature(self):
        """Un code sans règle est non classé mais garde sa classe"""
        for code in ('740000', '760000', '606000', '708000'):
            classement = classer(code)
            self.assertFalse(classement.est_classe, code)
            self.assertEqual(classement.rubrique, NON_CLASSE)
            self.assertEqual(classement.classe, int(code[0]))

    def test_code_vide(self):
        classement = classer('')
        self.assertIsNone(classement.classe)
        self.assertFalse(classement.est_classe)

    def test_rubriques_de_classe(self):
        rubriques = rubriques_de_classe(5)
        self.assertEqual(rubriques[0], 'titres_placement')
        self.assertIn('banque', rubriques)
        self.assertEqual(len(rubriques), len(set(rubriques)))

    def test_code_normalise(self):
        self.assertEqual(code_normalise('52'), '520000')
        self.assertEqual(code_normalise('40110000'), '401100')


class PlanComptableTestCase(SimpleTestCase):

    def setUp(self):
        self.plan = PlanComptable([
            Compte(id=1, code='521000', libelle='Banque'),
            Compte(id=2, code='701000', libelle='Ventes'),
            Compte(id=3, code='740000', libelle='Compte hors nomenclature'),
        ])

    def test_comptes_de(self):
        self.assertEqual([c.id for c in self.plan.comptes_de('banque', 'caisse')], [1])

    def test_non_classes(self):
        self.assertEqual([c.code for c in self.plan.non_classes()], ['740000'])

    def test_avertissements(self):
        avertissements = self.plan.avertissements([1, 2, 3, 3])
        self.assertEqual(len(avertissements), 1)
        self.assertIsInstance(avertissements[0], CompteNonClasse)
        self.assertEqual(avertissements[0].code_compte, '740000')
        self.assertIn('740000', str(avertissements[0]))

    def test_compte_inconnu(self):
        compte = self.plan.compte(99)
        self.assertEqual(compte.code, '?99')
        self.assertFalse(self.plan.classement(99).est_classe)


class ValidationEcritureTestCase(SimpleTestCase):
    """Contrôle d'équilibre et cycle BROUILLON -> VALIDEE"""

    def _ecriture(self, *lignes, statut=BROUILLON):
        return Ecriture(id=1, numero='OD240001', date=date(2024, 1, 15), journal_id=1,
                        lignes=tuple(lignes), statut=statut)

    def test_ecriture_equilibree_comptabilisee(self):
        ecriture = self._ecriture(
            LigneEcriture(compte_id=512, debit=Decimal('1000')),
            LigneEcriture(compte_id=701, credit=Decimal('1000')),
        )

        validee = comptabiliser(ecriture, CONTEXTE)

        self.assertEqual(validee.statut, VALIDEE)
        self.assertTrue(validee.est_validee)
        # L'original n'est pas modifié
        self.assertEqual(ecriture.statut, BROUILLON)

    def test_ecriture_desequilibree_rejetee(self):
        ecriture = self._ecriture(
            LigneEcriture(compte_id=512, debit=Decimal('1000')),
            LigneEcriture(compte_id=701, credit=Decimal('999')),
        )

        with self.assertRaises(EcritureDesequilibree) as ctx:
            comptabiliser(ecriture, CONTEXTE)

        self.assertEqual(ctx.exception.ecart, Decimal('1'))
        self.assertEqual(ctx.exception.total_debit, Decimal('1000'))
        self.assertEqual(ctx.exception.total_credit, Decimal('999'))

    def test_pas_de_tolerance_en_mono_devise(self):
        with self.assertRaises(EcritureDesequilibree):
            valider([
                LigneEcriture(compte_id=1, debit=Decimal('100.00')),
                LigneEcriture(compte_id=2, credit=Decimal('99.99')),
            ], CONTEXTE)

    def test_tolerance_d_arrondi_en_multi_devises(self):
        """33.33 USD à 3 = 99.99 XAF contre 100 XAF : écart d'arrondi accepté"""
        equilibre = valider([
            LigneEcriture(compte_id=1, debit=Decimal('33.33'), devise='USD', taux_change=Decimal('3')),
            LigneEcriture(compte_id=2, credit=Decimal('100')),
        ], CONTEXTE)

        self.assertTrue(equilibre.multidevise)
        self.assertEqual(equilibre.ecart, Decimal('-0.01'))

    def test_ecart_multi_devises_hors_tolerance(self):
        with self.assertRaises(EcritureDesequilibree) as ctx:
            valider([
                LigneEcriture(compte_id=1, debit=Decimal('33'), devise='USD', taux_change=Decimal('3')),
                LigneEcriture(compte_id=2, credit=Decimal('100')),
            ], CONTEXTE)
        self.assertEqual(ctx.exception.tolerance, Decimal('0.01'))

    def test_lignes_invalides(self):
        cas = [
            LigneEcriture(compte_id=1, debit=Decimal('10'), credit=Decimal('10')),
            LigneEcriture(compte_id=1, debit=Decimal('-10')),
            LigneEcriture(compte_id=1),
            LigneEcriture(compte_id=1, debit=Decimal('10'), taux_change=Decimal('0')),
        ]
        for ligne in cas:
            with self.subTest(ligne=ligne):
                with self.assertRaises(LigneInvalide):
                    valider([ligne, LigneEcriture(compte_id=2, credit=Decimal('10'))], CONTEXTE)

    def test_ecriture_sans_ligne(self):
        with self.assertRaises(LigneInvalide):
            comptabiliser(self._ecriture(), CONTEXTE)

    def test_ecriture_deja_validee(self):
        ecriture = self._ecriture(
            LigneEcriture(compte_id=1, debit=Decimal('10')),
            LigneEcriture(compte_id=2, credit=Decimal('10')),
            statut=VALIDEE,
        )
        with self.assertRaises(TransitionInvalide):
            comptabiliser(ecriture, CONTEXTE)

    def test_calculer_equilibre_ne_leve_pas(self):
        equilibre = calculer_equilibre([
            LigneEcriture(compte_id=1, debit=Decimal('500')),
            LigneEcriture(compte_id=2, credit=Decimal('300')),
        ], CONTEXTE)
        self.assertEqual(equilibre.ecart, Decimal('200'))
        self.assertFalse(equilibre.multidevise)

    def test_contrepassation(self):
        ecriture = self._ecriture(
            LigneEcriture(compte_id=1, debit=Decimal('750'), id=10),
            LigneEcriture(compte_id=2, credit=Decimal('750'), id=11),
            statut=VALIDEE,
        )

        extourne = contrepasser(ecriture, numero='OD240002', date_operation=date(2024, 2, 1))

        self.assertEqual(extourne.statut, BROUILLON)
        self.assertEqual(extourne.reference, 'Extourne OD240001')
        self.assertEqual(extourne.lignes[0].credit, Decimal('750'))
        self.assertEqual(extourne.lignes[1].debit, Decimal('750'))
        self.assertIsNone(extourne.lignes[0].id)
        self.assertEqual(comptabiliser(extourne, CONTEXTE).statut, VALIDEE)

    def test_contrepassation_d_un_brouillon(self):
        ecriture = self._ecriture(LigneEcriture(compte_id=1, debit=Decimal('1')))
        with self.assertRaises(TransitionInvalide):
            contrepasser(ecriture, numero='X', date_operation=date(2024, 2, 1))


def _ligne(compte_id, jour, debit='0', credit='0', numero='OD0001', statut=VALIDEE, **kwargs):
    return LigneComptabilisee(
        compte_id=compte_id, date=jour, numero=numero,
        debit=Decimal(debit), credit=Decimal(credit), statut=statut, **kwargs
    )


class CumulSoldesTestCase(SimpleTestCase):

    def setUp(self):
        self.lignes = [
            _ligne(1, date(2023, 12, 31), debit='1000', numero='BQ230010'),
            _ligne(2, date(2023, 12, 31), credit='1000', numero='BQ230010'),
            _ligne(1, date(2024, 1, 1), credit='200', numero='BQ240001'),
            _ligne(3, date(2024, 1, 1), debit='200', numero='BQ240001'),
            _ligne(1, date(2024, 1, 31), debit='50', numero='BQ240002'),
            _ligne(2, date(2024, 1, 31), credit='50', numero='BQ240002'),
            # brouillon : ignoré
            _ligne(1, date(2024, 1, 15), debit='9999', numero='BQ240003', statut=BROUILLON),
        ]

    def test_cumul_idempotent(self):
        premier = accumuler(self.lignes, Plage.entre(date(2024, 1, 1), date(2024, 1, 31)))
        second = accumuler(self.lignes, Plage.entre(date(2024, 1, 1), date(2024, 1, 31)))
        self.assertEqual(premier, second)
        self.assertEqual(len(self.lignes), 7)

    def test_plages(self):
        avant = accumuler(self.lignes, Plage.avant(date(2024, 1, 1)))
        self.assertEqual(avant[1], Solde(Decimal('1000'), Decimal('0')))
        self.assertNotIn(3, avant)

        periode = accumuler(self.lignes, Plage.entre(date(2024, 1, 1), date(2024, 1, 31)))
        self.assertEqual(periode[1].net, Decimal('-150'))

        cumul = accumuler(self.lignes, Plage.jusqu_au(date(2024, 1, 31)))
        self.assertEqual(cumul[1].net, Decimal('850'))

    def test_brouillons_exclus_et_grand_livre_equilibre(self):
        cumuls = accumuler(self.lignes)
        self.assertEqual(total(cumuls).net, Decimal('0'))

    def test_plage_inversee(self):
        with self.assertRaises(ParametreInvalide):
            Plage.entre(date(2024, 2, 1), date(2024, 1, 1))

    def test_filtre_devise(self):
        lignes = [
            _ligne(1, date(2024, 1, 2), debit='100', devise='USD', taux_change=Decimal('2000')),
            _ligne(2, date(2024, 1, 2), credit='200000', devise='CDF'),
        ]
        self.assertEqual(accumuler(lignes)[1].debit, Decimal('200000'))
        en_usd = accumuler(lignes, devise='USD')
        self.assertEqual(en_usd, {1: Solde(Decimal('100'), Decimal('0'))})

    def test_solde_progressif_trie(self):
        progression = solde_progressif(
            list(reversed(self.lignes)), 1, Decimal('1000'),
            Plage.entre(date(2024, 1, 1), date(2024, 1, 31)),
        )
        self.assertEqual([l.numero for l, _ in progression], ['BQ240001', 'BQ240002'])
        self.assertEqual([s for _, s in progression], [Decimal('800'), Decimal('850')])

    def test_ventiler(self):
        self.assertEqual(ventiler(Decimal('10')), (Decimal('10'), Decimal('0')))
        self.assertEqual(ventiler(Decimal('-10')), (Decimal('0'), Decimal('10')))
        self.assertEqual(ventiler(Decimal('0')), (Decimal('0'), Decimal('0')))
