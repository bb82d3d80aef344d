# apps/accounting/serializers/ecritures.py
"""
Serializers pour les écritures comptables OHADA
- EcritureComptable : en-tête + lignes, création atomique
- LigneEcriture : lignes de débit / crédit
"""

from decimal import Decimal

from rest_framework import serializers

from apps.accounting.models import EcritureComptable, LigneEcriture
from .base import CompteOHADAMinimalSerializer, JournalMinimalSerializer
from .tiers import TiersMinimalSerializer


class LigneEcritureSerializer(serializers.ModelSerializer):
    """
    Ligne d'écriture

    Règles :
    - Soit débit, soit crédit (jamais les deux)
    - Montants positifs
    """

    compte_detail = CompteOHADAMinimalSerializer(source='compte', read_only=True)
    tiers_detail = TiersMinimalSerializer(source='tiers', read_only=True)
    sens = serializers.CharField(read_only=True)

    class Meta:
        model = LigneEcriture
        fields = [
            'id',
            'numero_ligne',
            'compte',
            'compte_detail',
            'tiers',
            'tiers_detail',
            'libelle',
            'montant_debit',
            'montant_credit',
            'sens',
            'devise',
            'taux_change',
            'montant_base',
            'date_echeance',
        ]
        read_only_fields = ['numero_ligne', 'montant_base']

    def validate_compte(self, value):
        if not value.is_active:
            raise serializers.ValidationError("Le compte doit être actif")
        return value

    def validate_tiers(self, value):
        if value and not value.is_active:
            raise serializers.ValidationError("Le tiers doit être actif")
        if value and value.is_bloque:
            raise serializers.ValidationError(f"Le tiers {value.code} est bloqué")
        return value

    def validate_devise(self, value):
        return (value or '').upper()

    def validate(self, attrs):
        montant_debit = attrs.get('montant_debit', Decimal('0'))
        montant_credit = attrs.get('montant_credit', Decimal('0'))

        if montant_debit < 0 or montant_credit < 0:
            raise serializers.ValidationError("Les montants doivent être positifs")

        if montant_debit > 0 and montant_credit > 0:
            raise serializers.ValidationError({
                'montant_credit': "Une ligne ne peut avoir à la fois un débit et un crédit"
            })

        if montant_debit == 0 and montant_credit == 0:
            raise serializers.ValidationError({
                'montant_debit': "Au moins un montant doit être spécifié"
            })

        if attrs.get('taux_change') is not None and attrs['taux_change'] <= 0:
            raise serializers.ValidationError({'taux_change': "Le taux de change doit être positif"})

        return attrs


class EcritureComptableSerializer(serializers.ModelSerializer):
    """
    En-tête d'écriture avec ses lignes

    La création passe par services.comptabilisation.creer_ecriture (vue) :
    en-tête et lignes dans une même transaction. Une écriture validée
    est en lecture seule.
    """

    journal_detail = JournalMinimalSerializer(source='journal', read_only=True)
    lignes = LigneEcritureSerializer(many=True)
    valider = serializers.BooleanField(write_only=True, required=False, default=False)

    total_debit = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    total_credit = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    statut_display = serializers.CharField(source='get_statut_display', read_only=True)

    class Meta:
        model = EcritureComptable
        fields = [
            'id',
            'numero',
            'journal',
            'journal_detail',
            'date_ecriture',
            'date_piece',
            'libelle',
            'reference',
            'devise',
            'taux_change',
            'statut',
            'statut_display',
            'lignes',
            'valider',
            'total_debit',
            'total_credit',
            'created_at',
            'updated_at',
            'date_validation',
            'validee_par',
        ]
        read_only_fields = [
            'numero',
            'statut',
            'date_validation',
            'validee_par',
            'created_at',
            'updated_at'
        ]

    def validate_journal(self, value):
        if not value.is_active:
            raise serializers.ValidationError("Le journal doit être actif")
        return value

    def validate_devise(self, value):
        return (value or '').upper()

    def validate_lignes(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("Une écriture doit avoir au moins 2 lignes")
        return value

    def validate(self, attrs):
        if self.instance is not None and self.instance.est_validee:
            raise serializers.ValidationError("Une écriture validée ne peut pas être modifiée")
        return attrs


class EcritureComptableMinimalSerializer(serializers.ModelSerializer):
    """Serializer minimal pour les listes"""

    journal_code = serializers.CharField(source='journal.code', read_only=True)

    class Meta:
        model = EcritureComptable
        fields = ['id', 'numero', 'date_ecriture', 'libelle', 'reference', 'journal_code', 'statut']


class ContrepassationSerializer(serializers.Serializer):
    date_operation = serializers.DateField(required=False)
