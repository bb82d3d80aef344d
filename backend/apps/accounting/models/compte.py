# apps/accounting/models/compte.py
from django.db import models
from django.core.validators import RegexValidator

from apps.accounting.moteur.plan_comptable import classer
from apps.accounting.moteur.types import Compte


class CompteOHADA(models.Model):
    """
    Compte du plan comptable OHADA

    La classe (1 à 9) est déduite du premier chiffre du code. Le
    rattachement aux rubriques des états financiers se fait par préfixe
    (voir moteur.plan_comptable), jamais par le type.
    """
    TYPES_COMPTE = [
        ('actif', 'Actif'),
        ('passif', 'Passif'),
        ('capitaux', 'Capitaux propres'),
        ('charge', 'Charge'),
        ('produit', 'Produit'),
        ('creance', 'Créance'),
        ('dette', 'Dette'),
    ]

    code = models.CharField(
        max_length=10,
        unique=True,
        validators=[RegexValidator(r'^\d{2,10}$', 'Le code doit contenir de 2 à 10 chiffres')]
    )
    libelle = models.CharField(max_length=255)
    classe = models.CharField(max_length=1, editable=False)  # 1-9
    type = models.CharField(max_length=20, choices=TYPES_COMPTE)

    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='sous_comptes'
    )

    reconciliable = models.BooleanField(
        default=False,
        help_text="Compte lettrable (tiers, banque)"
    )

    # Compte de trésorerie tenu dans une autre devise que la devise de base
    devise = models.CharField(
        max_length=3,
        blank=True,
        help_text="Code devise ISO, vide pour la devise de base"
    )

    solde_normal = models.CharField(
        max_length=20,
        choices=[
            ('debiteur', 'Débiteur'),
            ('crediteur', 'Créditeur'),
            ('variable', 'Variable'),
        ],
        default='debiteur',
        help_text="Solde normal du compte selon OHADA"
    )

    note = models.TextField(
        blank=True,
        null=True,
        help_text="Notes ou précisions sur le compte"
    )

    # Métadonnées
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Compte OHADA"
        verbose_name_plural = "Comptes OHADA"
        ordering = ['code']

    def __str__(self):
        return f"{self.code} - {self.libelle}"

    def save(self, *args, **kwargs):
        self.classe = self.code[:1] if self.code else ''
        super().save(*args, **kwargs)

    @property
    def classement(self):
        """Classe et rubrique OHADA du compte"""
        return classer(self.code)

    def vers_moteur(self):
        return Compte(
            id=self.pk,
            code=self.code,
            libelle=self.libelle,
            type=self.type,
            parent_id=self.parent_id,
            reconciliable=self.reconciliable,
            devise=self.devise or None,
        )
