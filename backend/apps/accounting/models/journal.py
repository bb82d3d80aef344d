# apps/accounting/models/journal.py
from django.db import models
from django.core.validators import RegexValidator

from apps.accounting.moteur.types import Journal as JournalMoteur


class Journal(models.Model):
    """
    Journal comptable selon OHADA
    """
    TYPES_JOURNAL = [
        ('AC', 'Achats'),
        ('VT', 'Ventes'),
        ('BQ', 'Banque'),
        ('CA', 'Caisse'),
        ('AN', 'À nouveaux'),
        ('OD', 'Opérations Diverses'),
    ]

    code = models.CharField(
        max_length=10,
        unique=True,
        validators=[RegexValidator(r'^[A-Z0-9]+$', 'Le code doit contenir uniquement des lettres majuscules et chiffres')]
    )
    libelle = models.CharField(max_length=100)
    type = models.CharField(max_length=2, choices=TYPES_JOURNAL)

    # Compte de trésorerie associé (journaux BQ / CA)
    compte_contrepartie = models.ForeignKey(
        'CompteOHADA',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='journaux_contrepartie'
    )

    # Métadonnées
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Journal"
        verbose_name_plural = "Journaux"
        ordering = ['code']

    def __str__(self):
        return f"{self.code} - {self.libelle}"

    @classmethod
    def par_type(cls, type_journal):
        """Premier journal actif du type demandé"""
        journal = cls.objects.filter(type=type_journal, is_active=True).order_by('code').first()
        if journal is None:
            journal = cls.objects.create(
                code=type_journal,
                libelle=dict(cls.TYPES_JOURNAL)[type_journal],
                type=type_journal,
            )
        return journal

    def vers_moteur(self):
        return JournalMoteur(id=self.pk, code=self.code, libelle=self.libelle, type=self.type)
