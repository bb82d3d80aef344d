# apps/accounting/models/tiers.py
import re
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.db import models
from django.db.models import Sum

from apps.accounting.moteur.types import Tiers as TiersMoteur
from .compte import CompteOHADA


class Tiers(models.Model):
    """
    Tiers (clients, fournisseurs, personnel) rattachés à un compte collectif
    - FLOC : Fournisseurs locaux (4011)
    - FGRP : Fournisseurs groupe (4012)
    - CLOC : Clients locaux (4111)
    - CGRP : Clients groupe (4112)
    - EMPL : Employés (421)

    Le compte collectif reçoit automatiquement les lignes de créance ou
    de dette lors de la comptabilisation des factures et règlements.
    """

    TYPES_TIERS = [
        ('FLOC', 'Fournisseur local'),
        ('FGRP', 'Fournisseur groupe'),
        ('CLOC', 'Client local'),
        ('CGRP', 'Client groupe'),
        ('EMPL', 'Employé'),
    ]

    # Mapping type -> compte collectif
    COMPTES_COLLECTIFS = {
        'FLOC': '40110000',
        'FGRP': '40120000',
        'CLOC': '41110000',
        'CGRP': '41120000',
        'EMPL': '42100000',
    }

    # Code auxiliaire (FLOC00001, CGRP00002, etc.)
    code = models.CharField(
        max_length=9,
        unique=True,
        blank=True,
        validators=[
            RegexValidator(
                r'^(FLOC|FGRP|CLOC|CGRP|EMPL)\d{5}$',
                'Le code doit être au format : FLOC00001, CGRP00002, etc.'
            )
        ],
        help_text="Code généré automatiquement selon le type"
    )

    type_tiers = models.CharField(
        max_length=4,
        choices=TYPES_TIERS,
        help_text="Détermine le compte collectif et le préfixe du code"
    )

    compte_collectif = models.ForeignKey(
        'CompteOHADA',
        on_delete=models.PROTECT,
        related_name='tiers_rattaches',
        blank=True,
        help_text="Compte collectif, déterminé par le type si non renseigné"
    )

    raison_sociale = models.CharField(
        max_length=200,
        help_text="Dénomination sociale ou nom complet"
    )

    sigle = models.CharField(max_length=50, blank=True)

    # Pour les employés uniquement
    matricule = models.CharField(
        max_length=20,
        blank=True,
        unique=True,
        null=True,
        help_text="Matricule de l'employé (si type EMPL)"
    )

    numero_contribuable = models.CharField(
        max_length=50,
        blank=True,
        unique=True,
        null=True,
        help_text="Numéro d'identification fiscale"
    )

    adresse = models.TextField(blank=True)
    ville = models.CharField(max_length=100, blank=True)
    pays = models.CharField(max_length=100, default='Cameroun')
    telephone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)

    delai_paiement = models.PositiveIntegerField(
        default=30,
        help_text="Délai de paiement en jours"
    )

    plafond_credit = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Plafond de crédit autorisé (clients uniquement)"
    )

    is_active = models.BooleanField(default=True)
    is_bloque = models.BooleanField(
        default=False,
        help_text="Bloquer toute transaction"
    )
    motif_blocage = models.TextField(blank=True)

    # Métadonnées
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tiers_crees'
    )

    class Meta:
        verbose_name = "Tiers"
        verbose_name_plural = "Tiers"
        ordering = ['type_tiers', 'code']
        indexes = [
            models.Index(fields=['type_tiers', 'code']),
        ]

    def __str__(self):
        return f"{self.code} - {self.raison_sociale}"

    def clean(self):
        """Validations métier"""
        if self.type_tiers == 'EMPL' and not self.matricule:
            raise ValidationError("Le matricule est obligatoire pour un employé")

        if self.code and self.type_tiers:
            if not self.code.startswith(self.type_tiers):
                raise ValidationError(
                    f"Le code doit commencer par {self.type_tiers} pour ce type de tiers"
                )

        if self.compte_collectif_id and self.compte_collectif.classe != '4':
            raise ValidationError("Le compte collectif d'un tiers doit être un compte de classe 4")

    def save(self, *args, **kwargs):
        if not self.pk and not self.code:
            self.code = self._generer_code()

        if self.type_tiers and not self.compte_collectif_id:
            code_collectif = self.COMPTES_COLLECTIFS[self.type_tiers]
            try:
                self.compte_collectif = CompteOHADA.objects.get(code=code_collectif)
            except CompteOHADA.DoesNotExist:
                raise ValidationError(
                    f"Le compte collectif {code_collectif} n'existe pas. "
                    f"Veuillez d'abord créer ce compte dans le plan comptable."
                )

        self.full_clean()
        super().save(*args, **kwargs)

    def _generer_code(self):
        """Prochain code libre pour le type : FLOC00001, FLOC00002..."""
        if not self.type_tiers:
            raise ValidationError("Le type de tiers doit être défini")

        numeros = [
            int(match.group(1))
            for match in (
                re.search(r'(\d{5})$', code)
                for code in Tiers.objects.filter(code__startswith=self.type_tiers).values_list('code', flat=True)
            )
            if match
        ]
        prochain_numero = max(numeros) + 1 if numeros else 1
        return f"{self.type_tiers}{prochain_numero:05d}"

    @property
    def est_fournisseur(self):
        return self.type_tiers in ['FLOC', 'FGRP']

    @property
    def est_client(self):
        return self.type_tiers in ['CLOC', 'CGRP']

    @property
    def est_employe(self):
        return self.type_tiers == 'EMPL'

    @property
    def solde_comptable(self):
        """Solde net (débit - crédit) des lignes validées du tiers"""
        totaux = self.lignes_ecritures.filter(ecriture__statut='VALIDEE').aggregate(
            debit=Sum('montant_debit'),
            credit=Sum('montant_credit'),
        )
        return (totaux['debit'] or Decimal('0')) - (totaux['credit'] or Decimal('0'))

    def echeance(self, date_operation):
        return date_operation + timedelta(days=self.delai_paiement)

    def bloquer(self, motif):
        self.is_bloque = True
        self.motif_blocage = motif
        self.save()

    def debloquer(self):
        self.is_bloque = False
        self.motif_blocage = ""
        self.save()

    def vers_moteur(self):
        return TiersMoteur(
            id=self.pk,
            code=self.code,
            nom=self.raison_sociale,
            compte_id=self.compte_collectif_id,
        )
