# apps/accounting/models/facture.py
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from apps.accounting.moteur.types import Facture as FactureMoteur


class Facture(models.Model):
    """
    Facture client ou fournisseur

    BROUILLON -> COMPTABILISEE (écriture VT / AC générée) -> PAYEE
    lorsque les règlements couvrent le total TTC.
    """

    TYPES = [
        ('client', 'Facture client'),
        ('fournisseur', 'Facture fournisseur'),
    ]

    STATUTS = [
        ('BROUILLON', 'Brouillon'),
        ('COMPTABILISEE', 'Comptabilisée'),
        ('PAYEE', 'Payée'),
    ]

    numero = models.CharField(max_length=30, unique=True)
    type = models.CharField(max_length=12, choices=TYPES, default='client')

    tiers = models.ForeignKey(
        'Tiers',
        on_delete=models.PROTECT,
        related_name='factures'
    )

    date_facture = models.DateField(default=date.today)
    date_echeance = models.DateField(null=True, blank=True)

    # Compte de produit (7x) ou de charge (6x)
    compte_gestion = models.ForeignKey(
        'CompteOHADA',
        on_delete=models.PROTECT,
        related_name='factures_gestion',
        help_text="Compte de vente (70x) ou d'achat (60x)"
    )

    # Compte de TVA collectée (443) ou déductible (445)
    compte_tva = models.ForeignKey(
        'CompteOHADA',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='factures_tva'
    )

    total_ht = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    total_tva = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    total_ttc = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    montant_regle = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    statut = models.CharField(max_length=15, choices=STATUTS, default='BROUILLON')

    ecriture = models.OneToOneField(
        'EcritureComptable',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='facture'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Facture"
        verbose_name_plural = "Factures"
        ordering = ['-date_facture', '-numero']
        indexes = [
            models.Index(fields=['type', 'statut']),
            models.Index(fields=['tiers', 'date_echeance']),
        ]

    def __str__(self):
        return f"{self.numero} - {self.tiers.raison_sociale} - {self.total_ttc}"

    def clean(self):
        if self.total_ht < 0 or self.total_tva < 0:
            raise ValidationError("Les montants d'une facture doivent être positifs")
        if self.total_tva > 0 and not self.compte_tva_id:
            raise ValidationError("Un compte de TVA est requis lorsque la facture porte de la TVA")
        if self.montant_regle > self.total_ttc:
            raise ValidationError("Le montant réglé ne peut pas dépasser le total TTC")

    def save(self, *args, **kwargs):
        self.total_ttc = (self.total_ht or Decimal('0')) + (self.total_tva or Decimal('0'))
        if not self.date_echeance and self.tiers_id:
            self.date_echeance = self.tiers.echeance(self.date_facture)
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def reste_a_payer(self):
        return self.total_ttc - self.montant_regle

    @property
    def est_client(self):
        return self.type == 'client'

    def vers_moteur(self):
        return FactureMoteur(
            id=self.pk,
            tiers_id=self.tiers_id,
            date=self.date_facture,
            total_ttc=self.total_ttc,
            montant_regle=self.montant_regle,
            date_echeance=self.date_echeance,
            numero=self.numero,
            type=self.type,
        )
