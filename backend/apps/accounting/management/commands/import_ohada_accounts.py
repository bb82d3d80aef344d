import json
import logging
import os

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.accounting.models import CompteOHADA, Journal

logger = logging.getLogger(__name__)

FICHIER_PAR_DEFAUT = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    'fixtures', 'ohada_accounts.json'
)


class Command(BaseCommand):
    help = "Importe le plan comptable OHADA depuis un fichier JSON et crée les journaux de base"

    def add_arguments(self, parser):
        parser.add_argument(
            '--file',
            type=str,
            default=FICHIER_PAR_DEFAUT,
            help='Chemin vers le fichier JSON des comptes OHADA'
        )
        parser.add_argument(
            '--sans-journaux',
            action='store_true',
            help='Ne pas créer les journaux AC, VT, BQ, CA, AN, OD'
        )

    def handle(self, *args, **options):
        file_path = options['file']

        if not os.path.exists(file_path):
            raise CommandError(f'Fichier non trouvé : {file_path}')

        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        with transaction.atomic():
            created_count, updated_count = self.importer_comptes(data)
            if not options['sans_journaux']:
                self.creer_journaux()

        non_classes = [c.code for c in CompteOHADA.objects.order_by('code') if not c.classement.est_classe]
        for code in non_classes:
            self.stdout.write(self.style.WARNING(
                f"Compte {code} hors nomenclature OHADA : exclu des états de synthèse"
            ))

        logger.info("Plan comptable importé : %s créés, %s mis à jour", created_count, updated_count)
        self.stdout.write(
            self.style.SUCCESS(
                f'Import terminé : {created_count} comptes créés, '
                f'{updated_count} comptes mis à jour ({settings.COMPTABILITE["DEVISE_BASE"]})'
            )
        )

    def importer_comptes(self, data):
        created_count = 0
        updated_count = 0

        # Parents avant enfants : un parent est le plus long code existant préfixe du compte
        for compte_data in sorted(data, key=lambda c: (len(c['code']), c['code'])):
            code = compte_data['code']
            compte, created = CompteOHADA.objects.update_or_create(
                code=code,
                defaults={
                    'libelle': compte_data['libelle'],
                    'type': compte_data['type'],
                    'solde_normal': compte_data.get('solde_normal', 'debiteur'),
                    'devise': compte_data.get('devise', ''),
                    'parent': self.trouver_parent(code),
                }
            )

            if created:
                created_count += 1
            else:
                updated_count += 1

        return created_count, updated_count

    def trouver_parent(self, code):
        for longueur in range(len(code) - 1, 1, -1):
            parent = CompteOHADA.objects.filter(code=code[:longueur]).first()
            if parent is not None:
                return parent
        return None

    def creer_journaux(self):
        for type_journal, _ in Journal.TYPES_JOURNAL:
            journal = Journal.par_type(type_journal)
            self.stdout.write(f"Journal {journal.code} - {journal.libelle}")
