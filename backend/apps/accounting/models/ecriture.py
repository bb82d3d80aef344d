# apps/accounting/models/ecriture.py
from datetime import date
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum

from apps.accounting.moteur import types as moteur
from apps.accounting.moteur.exceptions import EcritureVerrouillee, ErreurComptable, LigneInvalide
from apps.accounting.moteur.validation import controler_ligne


class EcritureComptable(models.Model):
    """
    En-tête d'écriture comptable selon OHADA (en-tête + lignes)

    Cycle de vie : BROUILLON -> VALIDEE, définitif. Une écriture validée
    et ses lignes ne se modifient ni ne se suppriment ; une correction
    passe par une écriture de contrepassation.
    """

    STATUTS = [
        (moteur.BROUILLON, 'Brouillon'),
        (moteur.VALIDEE, 'Validée'),
    ]

    numero = models.CharField(
        max_length=20,
        unique=True,
        blank=True,
        help_text="Numéro automatique : AC240001, VT240002, etc."
    )

    journal = models.ForeignKey(
        'Journal',
        on_delete=models.PROTECT,
        related_name='ecritures',
        help_text="Journal comptable (AC, VT, BQ, etc.)"
    )

    date_ecriture = models.DateField(
        default=date.today,
        help_text="Date de l'écriture comptable"
    )

    date_piece = models.DateField(
        null=True,
        blank=True,
        help_text="Date de la pièce justificative"
    )

    libelle = models.CharField(
        max_length=200,
        help_text="Libellé général de l'écriture (ex: RELEVES, FACTURE, etc.)"
    )

    reference = models.CharField(
        max_length=50,
        blank=True,
        help_text="Référence externe (numéro facture, etc.)"
    )

    statut = models.CharField(
        max_length=10,
        choices=STATUTS,
        default=moteur.BROUILLON
    )

    devise = models.CharField(
        max_length=3,
        blank=True,
        help_text="Devise de saisie, vide pour la devise de base"
    )

    taux_change = models.DecimalField(
        max_digits=18,
        decimal_places=8,
        default=Decimal('1'),
        help_text="Taux de la devise de saisie vers la devise de base"
    )

    date_validation = models.DateTimeField(null=True, blank=True)

    validee_par = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ecritures_validees'
    )

    # Métadonnées
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ecritures_creees'
    )

    class Meta:
        verbose_name = "Écriture Comptable"
        verbose_name_plural = "Écritures Comptables"
        ordering = ['-date_ecriture', '-numero']
        indexes = [
            models.Index(fields=['journal', 'date_ecriture']),
            models.Index(fields=['statut', 'date_ecriture']),
        ]

    def __str__(self):
        return f"{self.numero} - {self.journal.code} - {self.libelle}"

    @property
    def est_validee(self):
        return self.statut == moteur.VALIDEE

    def _verifier_modifiable(self):
        if not self.pk:
            return
        statut = EcritureComptable.objects.filter(pk=self.pk).values_list('statut', flat=True).first()
        if statut == moteur.VALIDEE:
            raise ValidationError(str(EcritureVerrouillee(f"L'écriture {self.numero} est validée : modification interdite")))

    def save(self, *args, **kwargs):
        self._verifier_modifiable()

        if not self.pk and not self.numero:
            self.numero = self._generer_numero()

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.est_validee:
            raise ValidationError(str(EcritureVerrouillee(f"L'écriture {self.numero} est validée : suppression interdite")))
        return super().delete(*args, **kwargs)

    def _generer_numero(self):
        """Format : <journal><aa><0001>, séquence par journal et par année"""
        if not self.journal_id:
            raise ValidationError("Le journal doit être défini")

        annee = str((self.date_ecriture or date.today()).year)[2:]
        prefix = f"{self.journal.code}{annee}"

        derniere_ecriture = EcritureComptable.objects.filter(
            numero__startswith=prefix
        ).order_by('-numero').first()

        nouveau_num = 1
        if derniere_ecriture:
            suffixe = derniere_ecriture.numero[len(prefix):]
            if suffixe.isdigit():
                nouveau_num = int(suffixe) + 1

        return f"{prefix}{nouveau_num:04d}"

    @property
    def total_debit(self):
        return self.lignes.aggregate(total=Sum('montant_debit'))['total'] or Decimal('0')

    @property
    def total_credit(self):
        return self.lignes.aggregate(total=Sum('montant_credit'))['total'] or Decimal('0')

    @property
    def difference(self):
        return self.total_debit - self.total_credit

    def vers_moteur(self):
        return moteur.Ecriture(
            id=self.pk,
            numero=self.numero,
            date=self.date_ecriture,
            journal_id=self.journal_id,
            lignes=tuple(ligne.vers_moteur() for ligne in self.lignes.all()),
            reference=self.reference,
            statut=self.statut,
            devise=self.devise or None,
            taux_change=self.taux_change,
        )

    def valider(self, user=None, contexte=None):
        """Valide l'écriture (contrôle d'équilibre, passage définitif en VALIDEE)"""
        from apps.accounting.services.comptabilisation import comptabiliser_ecriture
        try:
            return comptabiliser_ecriture(self, contexte=contexte, user=user)
        except ErreurComptable as e:
            raise ValidationError(str(e))

    def contrepasser(self, date_operation=None, user=None, contexte=None):
        """Crée et valide l'écriture d'extourne de cette écriture"""
        from apps.accounting.services.comptabilisation import contrepasser_ecriture
        try:
            return contrepasser_ecriture(self, date_operation=date_operation, contexte=contexte, user=user)
        except ErreurComptable as e:
            raise ValidationError(str(e))


class LigneEcriture(models.Model):
    """
    Ligne d'écriture comptable

    Montants dans la devise de la ligne ; taux_change la convertit en
    devise de base, sauf si montant_base fixe la contre-valeur.
    """

    ecriture = models.ForeignKey(
        EcritureComptable,
        on_delete=models.CASCADE,
        related_name='lignes'
    )

    numero_ligne = models.PositiveSmallIntegerField(
        default=0,
        help_text="Ordre de la ligne dans l'écriture"
    )

    compte = models.ForeignKey(
        'CompteOHADA',
        on_delete=models.PROTECT,
        related_name='lignes_ecritures',
        help_text="Compte du plan OHADA"
    )

    tiers = models.ForeignKey(
        'Tiers',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='lignes_ecritures',
        help_text="Tiers pour les comptes auxiliaires"
    )

    libelle = models.CharField(
        max_length=200,
        blank=True,
        help_text="Libellé de la ligne comptable"
    )

    montant_debit = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=0,
        help_text="Montant au débit"
    )

    montant_credit = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=0,
        help_text="Montant au crédit"
    )

    devise = models.CharField(
        max_length=3,
        blank=True,
        help_text="Code devise ISO, vide pour la devise de base"
    )

    taux_change = models.DecimalField(
        max_digits=18,
        decimal_places=8,
        default=Decimal('1'),
        help_text="Taux de la devise de la ligne vers la devise de base"
    )

    montant_base = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Contre-valeur en devise de base arrêtée à la saisie (conversions)"
    )

    date_echeance = models.DateField(
        null=True,
        blank=True,
        help_text="Date d'échéance pour les tiers"
    )

    # Métadonnées
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Ligne d'Écriture"
        verbose_name_plural = "Lignes d'Écriture"
        ordering = ['ecriture', 'numero_ligne']
        indexes = [
            models.Index(fields=['compte', 'ecriture']),
            models.Index(fields=['tiers']),
        ]

    def __str__(self):
        return f"{self.compte.code} - {self.libelle} - {self.montant} {self.sens}"

    def clean(self):
        """Validations métier"""
        try:
            controler_ligne(self.vers_moteur())
        except LigneInvalide as e:
            raise ValidationError(str(e))

        # Cohérence tiers / compte collectif
        if self.tiers_id and self.compte_id and self.compte.classe == '4':
            if not self.compte.code.startswith(self.tiers.compte_collectif.code[:4]):
                raise ValidationError(
                    f"Le compte {self.compte.code} ne correspond pas au tiers {self.tiers.code}"
                )

    def save(self, *args, **kwargs):
        if self.ecriture.est_validee:
            raise ValidationError(str(EcritureVerrouillee(f"L'écriture {self.ecriture.numero} est validée")))

        if not self.numero_ligne:
            max_num = self.ecriture.lignes.aggregate(
                max_num=models.Max('numero_ligne')
            )['max_num'] or 0
            self.numero_ligne = max_num + 1

        if not self.libelle:
            self.libelle = self.ecriture.libelle

        if self.tiers_id and not self.date_echeance:
            self.date_echeance = self.tiers.echeance(self.ecriture.date_ecriture)

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.ecriture.est_validee:
            raise ValidationError(str(EcritureVerrouillee(f"L'écriture {self.ecriture.numero} est validée")))
        return super().delete(*args, **kwargs)

    @property
    def sens(self):
        return "D" if self.montant_debit > 0 else "C"

    @property
    def montant(self):
        return self.montant_debit if self.montant_debit > 0 else self.montant_credit

    def vers_moteur(self):
        return moteur.LigneEcriture(
            compte_id=self.compte_id,
            debit=self.montant_debit or Decimal('0'),
            credit=self.montant_credit or Decimal('0'),
            tiers_id=self.tiers_id,
            devise=self.devise or None,
            taux_change=self.taux_change,
            date_echeance=self.date_echeance,
            libelle=self.libelle,
            id=self.pk,
            montant_base=self.montant_base,
        )
