# apps/api/tests/test_etats_api.py
"""
Tests pour l'EtatsViewSet et les endpoints de devises
"""

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounting.models import CompteOHADA, ConversionDevise, Facture, Journal, TauxChange, Tiers
from apps.accounting.services.comptabilisation import comptabiliser_facture, creer_ecriture

User = get_user_model()

PERIODE = 'debut=2024-01-01&fin=2024-01-31'


class EtatsAPITestCase(APITestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username='comptable', password='testpass123')

        def compte(code, libelle, type_compte, devise=''):
            return CompteOHADA.objects.create(code=code, libelle=libelle, type=type_compte, devise=devise)

        cls.capital = compte('101000', 'Capital social', 'capitaux')
        cls.banque = compte('521000', 'Banque', 'actif')
        cls.caisse = compte('571000', 'Caisse', 'actif')
        cls.ventes = compte('701000', 'Ventes de marchandises', 'produit')
        cls.personnel = compte('661000', 'Rémunérations', 'charge')
        cls.clients = compte('41110000', 'Clients', 'creance')
        cls.tiers_client = Tiers.objects.create(type_tiers='CLOC', raison_sociale='Client Test SARL')

        cls.journal_bq = Journal.par_type('BQ')

        def passer(libelle, jour, debit, credit, montant, journal=None):
            creer_ecriture(
                journal=journal or cls.journal_bq,
                libelle=libelle,
                date_ecriture=jour,
                valider=True,
                lignes=[
                    {'compte': debit, 'montant_debit': Decimal(montant)},
                    {'compte': credit, 'montant_credit': Decimal(montant)},
                ],
            )

        passer('Apport en capital', date(2023, 12, 1), cls.banque, cls.capital, '1000000')
        passer('Vente comptant', date(2024, 1, 5), cls.caisse, cls.ventes, '300000', Journal.par_type('CA'))
        passer('Salaires', date(2024, 1, 28), cls.personnel, cls.banque, '50000')

        cls.facture = Facture.objects.create(
            numero='FC-0001',
            type='client',
            tiers=cls.tiers_client,
            date_facture=date(2024, 1, 10),
            compte_gestion=cls.ventes,
            total_ht=Decimal('200000'),
        )
        comptabiliser_facture(cls.facture)

    def setUp(self):
        self.client.force_authenticate(user=self.user)

    def test_authentification_requise(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(f'/api/etats/balance_generale/?{PERIODE}')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_balance_generale(self):
        response = self.client.get(f'/api/etats/balance_generale/?{PERIODE}')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['equilibree'])
        self.assertEqual(response.data['totaux']['debit_final'], response.data['totaux']['credit_final'])

        banque = next(l for l in response.data['lignes'] if l['code'] == '521000')
        self.assertEqual(banque['debit_initial'], '1000000.00')
        self.assertEqual(banque['mouvement_credit'], '50000.00')
        self.assertEqual(banque['debit_final'], '950000.00')
        self.assertEqual(banque['rubrique'], 'banque')

    def test_periode_obligatoire(self):
        response = self.client.get('/api/etats/balance_generale/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_periode_inversee(self):
        response = self.client.get('/api/etats/balance_generale/?debut=2024-02-01&fin=2024-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_grand_livre(self):
        response = self.client.get(f'/api/etats/grand_livre/?{PERIODE}&comptes={self.banque.id}')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['solde_initial'], '1000000.00')
        self.assertEqual(response.data[0]['mouvements'][0]['solde'], '950000.00')
        self.assertEqual(response.data[0]['solde_final'], '950000.00')

    def test_grand_livre_comptes_invalides(self):
        response = self.client.get(f'/api/etats/grand_livre/?{PERIODE}&comptes=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_journal(self):
        response = self.client.get(f'/api/etats/journal/?{PERIODE}&journal={self.journal_bq.id}')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['ecritures']), 1)
        self.assertEqual(response.data['total_debit'], '50000.00')
        self.assertEqual(response.data['total_credit'], '50000.00')

    def test_journal_sans_identifiant(self):
        response = self.client.get(f'/api/etats/journal/?{PERIODE}')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_ecritures_du_journal(self):
        response = self.client.get(f'/api/journaux/{self.journal_bq.id}/ecritures/?{PERIODE}')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['journal_id'], self.journal_bq.id)

    def test_livre_de_caisse(self):
        response = self.client.get(f'/api/etats/livre_tresorerie/?{PERIODE}&nature=caisse')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['compte']['code'] for c in response.data], ['571000'])
        self.assertEqual(response.data[0]['solde_final'], '300000.00')

    def test_livre_tresorerie_nature_inconnue(self):
        response = self.client.get(f'/api/etats/livre_tresorerie/?{PERIODE}&nature=clients')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_balance_tiers(self):
        response = self.client.get(f'/api/etats/balance_tiers/?{PERIODE}&rubrique=clients')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['nom'], 'Client Test SARL')
        self.assertEqual(response.data[0]['solde'], '200000.00')

    def test_balance_agee(self):
        # Échéance au 9 février
        response = self.client.get('/api/etats/balance_agee/?date=2024-03-10&type=client')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['lignes']), 1)
        self.assertEqual(response.data['lignes'][0]['j1_30'], '200000.00')
        self.assertEqual(response.data['total']['total'], '200000.00')

        response = self.client.get('/api/etats/balance_agee/?date=2024-03-11&type=client')
        self.assertEqual(response.data['lignes'][0]['j31_60'], '200000.00')

    def test_balance_agee_type_inconnu(self):
        response = self.client.get('/api/etats/balance_agee/?type=salarie')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_etats_financiers(self):
        response = self.client.get(f'/api/etats/etats_financiers/?{PERIODE}')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['est_coherent'])
        self.assertEqual(response.data['sig']['chiffre_affaires'], '500000.00')
        self.assertEqual(response.data['sig']['resultat_net'], '450000.00')
        self.assertEqual(response.data['tft']['formation']['resultat_net'], '450000.00')
        self.assertEqual(response.data['bilan']['ecart_equation'], '0.00')
        self.assertEqual(response.data['avertissements'], [])


class DeviseAPITestCase(APITestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username='tresorier', password='testpass123')
        cls.banque_usd = CompteOHADA.objects.create(code='521100', libelle='Banque USD', type='actif', devise='USD')
        cls.caisse = CompteOHADA.objects.create(code='571000', libelle='Caisse', type='actif')
        cls.ventes = CompteOHADA.objects.create(code='701000', libelle='Ventes', type='produit')

    def setUp(self):
        self.client.force_authenticate(user=self.user)

    def test_cotation_taux_par_defaut(self):
        response = self.client.get('/api/conversions/taux/?devise_source=usd&devise_cible=cdf')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['taux']), Decimal('2000'))

    def test_cotation_depuis_la_table(self):
        TauxChange.objects.create(devise_source='USD', devise_cible='XAF', taux=Decimal('605.5'),
                                  date=date(2024, 1, 2))

        response = self.client.get('/api/taux/coter/?devise_source=USD&devise_cible=XAF&date=2024-01-31')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['taux']), Decimal('605.5'))

    def test_cotation_taux_introuvable(self):
        response = self.client.get('/api/conversions/taux/?devise_source=GBP&devise_cible=XAF')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('GBP', response.data['error'])

    def test_saisie_d_un_taux(self):
        response = self.client.post('/api/taux/', {
            'devise_source': 'eur', 'devise_cible': 'xaf', 'taux': '655.957', 'date': '2024-01-01',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['devise_source'], 'EUR')

        response = self.client.post('/api/taux/', {
            'devise_source': 'EUR', 'devise_cible': 'EUR', 'taux': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_conversion(self):
        response = self.client.post('/api/conversions/', {
            'compte_source': self.banque_usd.id,
            'compte_cible': self.caisse.id,
            'montant_source': '100.00',
            'taux': '600',
            'date_conversion': '2024-01-15',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['montant_cible'], '60000.00')
        self.assertEqual(response.data['devise_source'], 'USD')
        self.assertEqual(response.data['devise_cible'], 'XAF')

        trace = ConversionDevise.objects.get(pk=response.data['id'])
        self.assertEqual(trace.ecriture.statut, 'VALIDEE')
        self.assertEqual(trace.ecriture.lignes.count(), 2)

    def test_conversion_sans_taux_connu(self):
        response = self.client.post('/api/conversions/', {
            'compte_source': self.banque_usd.id,
            'compte_cible': self.caisse.id,
            'montant_source': '100.00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(ConversionDevise.objects.exists())

    def test_conversion_hors_tresorerie(self):
        response = self.client.post('/api/conversions/', {
            'compte_source': self.banque_usd.id,
            'compte_cible': self.ventes.id,
            'montant_source': '100.00',
            'taux': '600',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
