# apps/accounting/models/devise.py
from datetime import date

from django.core.exceptions import ValidationError
from django.db import models

from apps.accounting.moteur.types import ConversionDevise as ConversionMoteur


class TauxChange(models.Model):
    """Table des taux : 1 devise_source = taux devise_cible à la date donnée"""

    devise_source = models.CharField(max_length=3)
    devise_cible = models.CharField(max_length=3)
    taux = models.DecimalField(max_digits=18, decimal_places=8)
    date = models.DateField(default=date.today)
    source = models.CharField(max_length=50, blank=True, help_text="Origine du taux (BEAC, saisie...)")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Taux de change"
        verbose_name_plural = "Taux de change"
        ordering = ['-date', 'devise_source', 'devise_cible']
        unique_together = [('devise_source', 'devise_cible', 'date')]
        indexes = [
            models.Index(fields=['devise_source', 'devise_cible', 'date']),
        ]

    def __str__(self):
        return f"1 {self.devise_source} = {self.taux} {self.devise_cible} ({self.date})"

    def clean(self):
        if self.taux is not None and self.taux <= 0:
            raise ValidationError("Le taux de change doit être positif")
        if self.devise_source == self.devise_cible:
            raise ValidationError("Les devises source et cible doivent être différentes")


class ConversionDevise(models.Model):
    """
    Trace d'audit d'une conversion entre deux comptes de trésorerie.
    Toujours liée 1:1 à l'écriture validée qui l'a produite.
    """

    devise_source = models.CharField(max_length=3)
    devise_cible = models.CharField(max_length=3)
    montant_source = models.DecimalField(max_digits=18, decimal_places=2)
    montant_cible = models.DecimalField(max_digits=18, decimal_places=2)
    taux_change = models.DecimalField(max_digits=18, decimal_places=8)

    compte_source = models.ForeignKey(
        'CompteOHADA',
        on_delete=models.PROTECT,
        related_name='conversions_sortantes'
    )
    compte_cible = models.ForeignKey(
        'CompteOHADA',
        on_delete=models.PROTECT,
        related_name='conversions_entrantes'
    )

    ecriture = models.OneToOneField(
        'EcritureComptable',
        on_delete=models.PROTECT,
        related_name='conversion'
    )

    date_conversion = models.DateField(default=date.today)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Conversion de devises"
        verbose_name_plural = "Conversions de devises"
        ordering = ['-date_conversion', '-created_at']

    def __str__(self):
        return (
            f"{self.montant_source} {self.devise_source} -> "
            f"{self.montant_cible} {self.devise_cible} ({self.ecriture.numero})"
        )

    def vers_moteur(self):
        return ConversionMoteur(
            devise_source=self.devise_source,
            devise_cible=self.devise_cible,
            montant_source=self.montant_source,
            montant_cible=self.montant_cible,
            taux_change=self.taux_change,
            compte_source_id=self.compte_source_id,
            compte_cible_id=self.compte_cible_id,
            ecriture_id=self.ecriture_id,
        )
