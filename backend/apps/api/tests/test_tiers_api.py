# apps/api/tests/test_tiers_api.py
"""
Tests pour le TiersViewSet : codification, compte collectif, blocage
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounting.models import CompteOHADA, Journal, Tiers
from apps.accounting.services.comptabilisation import creer_ecriture

User = get_user_model()


class TiersAPITestCase(APITestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username='testuser', password='testpass123')

        cls.compte_fournisseur = CompteOHADA.objects.create(
            code='40110000', libelle='Fournisseurs', type='dette'
        )
        cls.compte_client = CompteOHADA.objects.create(
            code='41110000', libelle='Clients', type='creance'
        )
        cls.banque = CompteOHADA.objects.create(code='52100000', libelle='Banque', type='actif')

    def setUp(self):
        self.client.force_authenticate(user=self.user)

    def _creer(self, type_tiers, raison_sociale, **extra):
        response = self.client.post('/api/tiers/', {
            'type_tiers': type_tiers,
            'raison_sociale': raison_sociale,
            **extra,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def test_codification_automatique(self):
        premier = self._creer('CLOC', 'Client Alpha')
        second = self._creer('CLOC', 'Client Beta')
        fournisseur = self._creer('FLOC', 'Fournisseur Gamma')

        self.assertEqual(premier['code'], 'CLOC00001')
        self.assertEqual(second['code'], 'CLOC00002')
        self.assertEqual(fournisseur['code'], 'FLOC00001')

    def test_compte_collectif_deduit_du_type(self):
        data = self._creer('FLOC', 'Fournisseur Gamma')

        self.assertEqual(data['compte_collectif'], self.compte_fournisseur.id)
        self.assertEqual(data['compte_collectif_detail']['code'], '40110000')
        self.assertEqual(Tiers.objects.get(pk=data['id']).created_by, self.user)

    def test_compte_collectif_absent_du_plan(self):
        response = self.client.post('/api/tiers/', {
            'type_tiers': 'CGRP',
            'raison_sociale': 'Filiale',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Tiers.objects.exists())

    def test_matricule_reserve_aux_employes(self):
        response = self.client.post('/api/tiers/', {
            'type_tiers': 'CLOC',
            'raison_sociale': 'Client Alpha',
            'matricule': 'M-001',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('matricule', response.data)

    def test_plafond_reserve_aux_clients(self):
        response = self.client.post('/api/tiers/', {
            'type_tiers': 'FLOC',
            'raison_sociale': 'Fournisseur Gamma',
            'plafond_credit': '500000.00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('plafond_credit', response.data)

    def test_type_non_modifiable(self):
        data = self._creer('CLOC', 'Client Alpha')

        response = self.client.patch(f"/api/tiers/{data['id']}/", {'type_tiers': 'FLOC'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filtre_par_categorie(self):
        self._creer('CLOC', 'Client Alpha')
        self._creer('FLOC', 'Fournisseur Gamma')

        response = self.client.get('/api/tiers/?categorie=client')
        self.assertEqual([t['raison_sociale'] for t in response.data['results']], ['Client Alpha'])

        response = self.client.get('/api/tiers/fournisseurs/')
        self.assertEqual([t['raison_sociale'] for t in response.data['results']], ['Fournisseur Gamma'])

    def test_bloquer_debloquer(self):
        data = self._creer('CLOC', 'Client Alpha')

        response = self.client.post(f"/api/tiers/{data['id']}/bloquer/", {'motif': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f"/api/tiers/{data['id']}/bloquer/", {'motif': 'Impayés répétés'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        tiers = Tiers.objects.get(pk=data['id'])
        self.assertTrue(tiers.is_bloque)
        self.assertEqual(tiers.motif_blocage, 'Impayés répétés')

        response = self.client.get('/api/tiers/recherche_rapide/?q=Alpha')
        self.assertEqual(response.data, [])

        response = self.client.post(f"/api/tiers/{data['id']}/debloquer/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Tiers.objects.get(pk=data['id']).is_bloque)

        response = self.client.get('/api/tiers/recherche_rapide/?q=Alpha')
        self.assertEqual([t['code'] for t in response.data], ['CLOC00001'])

    def test_ecritures_et_solde(self):
        data = self._creer('CLOC', 'Client Alpha')
        tiers = Tiers.objects.get(pk=data['id'])
        creer_ecriture(
            journal=Journal.par_type('BQ'),
            libelle='Avance client',
            valider=True,
            lignes=[
                {'compte': self.banque, 'montant_debit': Decimal('5000')},
                {'compte': self.compte_client, 'tiers': tiers, 'montant_credit': Decimal('5000')},
            ],
        )

        response = self.client.get(f"/api/tiers/{tiers.id}/ecritures/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['solde']), Decimal('-5000'))
        self.assertEqual(len(response.data['lignes']), 1)
        self.assertEqual(response.data['lignes'][0]['compte'], '41110000')

    def test_suppression(self):
        mouvemente = Tiers.objects.get(pk=self._creer('CLOC', 'Client Alpha')['id'])
        inutilise = self._creer('CLOC', 'Client Beta')
        creer_ecriture(
            journal=Journal.par_type('OD'),
            libelle='Reprise de solde',
            lignes=[
                {'compte': self.compte_client, 'tiers': mouvemente, 'montant_debit': Decimal('10')},
                {'compte': self.banque, 'montant_credit': Decimal('10')},
            ],
        )

        response = self.client.delete(f"/api/tiers/{mouvemente.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mouvemente.refresh_from_db()
        self.assertFalse(mouvemente.is_active)

        response = self.client.delete(f"/api/tiers/{inutilise['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
