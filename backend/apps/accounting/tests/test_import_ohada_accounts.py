# apps/accounting/tests/test_import_ohada_accounts.py
"""
Tests de la commande import_ohada_accounts
"""

import json
import os
import tempfile
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from apps.accounting.models import CompteOHADA, Journal

COMPTES = [
    {"code": "101000", "libelle": "Capital social", "type": "capitaux", "solde_normal": "crediteur"},
    {"code": "10", "libelle": "Capital", "type": "capitaux", "solde_normal": "crediteur"},
    {"code": "521100", "libelle": "Banque USD", "type": "actif", "devise": "USD"},
    {"code": "740000", "libelle": "Compte hors nomenclature", "type": "produit", "solde_normal": "crediteur"},
]


class ImportPlanComptableTestCase(TestCase):

    def _fichier(self, comptes):
        descripteur, chemin = tempfile.mkstemp(suffix='.json')
        with os.fdopen(descripteur, 'w', encoding='utf-8') as f:
            json.dump(comptes, f)
        self.addCleanup(os.remove, chemin)
        return chemin

    def _importer(self, comptes=COMPTES, **options):
        sortie = StringIO()
        call_command('import_ohada_accounts', file=self._fichier(comptes), stdout=sortie, **options)
        return sortie.getvalue()

    def test_import_initial(self):
        sortie = self._importer()

        self.assertEqual(CompteOHADA.objects.count(), 4)
        capital = CompteOHADA.objects.get(code='101000')
        self.assertEqual(capital.parent.code, '10')
        self.assertIsNone(CompteOHADA.objects.get(code='10').parent)
        self.assertEqual(CompteOHADA.objects.get(code='521100').devise, 'USD')
        self.assertEqual(CompteOHADA.objects.get(code='521100').solde_normal, 'debiteur')
        self.assertIn('4 comptes créés, 0 comptes mis à jour', sortie)

    def test_journaux_de_base(self):
        self._importer()

        self.assertEqual(
            sorted(Journal.objects.values_list('type', flat=True)),
            sorted(t for t, _ in Journal.TYPES_JOURNAL),
        )

    def test_sans_journaux(self):
        self._importer(sans_journaux=True)
        self.assertFalse(Journal.objects.exists())

    def test_reimport_met_a_jour(self):
        self._importer()
        comptes = [dict(c) for c in COMPTES]
        comptes[0]['libelle'] = 'Capital social appelé'

        sortie = self._importer(comptes)

        self.assertEqual(CompteOHADA.objects.count(), 4)
        self.assertEqual(Journal.objects.count(), len(Journal.TYPES_JOURNAL))
        capital = CompteOHADA.objects.get(code='101000')
        self.assertEqual(capital.libelle, 'Capital social appelé')
        self.assertEqual(capital.parent.code, '10')
        self.assertIn('0 comptes créés, 4 comptes mis à jour', sortie)

    def test_compte_hors_nomenclature_signale(self):
        sortie = self._importer()

        self.assertIn('Compte 740000 hors nomenclature OHADA', sortie)
        self.assertNotIn('Compte 101000 hors nomenclature', sortie)

    def test_fichier_absent(self):
        with self.assertRaises(CommandError):
            call_command('import_ohada_accounts', file='/chemin/inexistant.json', stdout=StringIO())
