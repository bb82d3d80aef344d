# apps/accounting/serializers/devises.py
"""
Serializers pour les taux de change et les conversions de devises
"""

from decimal import Decimal

from rest_framework import serializers

from apps.accounting.models import CompteOHADA, ConversionDevise, TauxChange
from .base import CompteOHADAMinimalSerializer


class TauxChangeSerializer(serializers.ModelSerializer):

    class Meta:
        model = TauxChange
        fields = ['id', 'devise_source', 'devise_cible', 'taux', 'date', 'source', 'created_at']
        read_only_fields = ['created_at']

    def validate(self, attrs):
        attrs['devise_source'] = attrs['devise_source'].upper()
        attrs['devise_cible'] = attrs['devise_cible'].upper()
        if attrs['devise_source'] == attrs['devise_cible']:
            raise serializers.ValidationError("Les devises source et cible doivent être différentes")
        if attrs['taux'] <= 0:
            raise serializers.ValidationError({'taux': "Le taux de change doit être positif"})
        return attrs


class ConversionDeviseSerializer(serializers.ModelSerializer):

    compte_source_detail = CompteOHADAMinimalSerializer(source='compte_source', read_only=True)
    compte_cible_detail = CompteOHADAMinimalSerializer(source='compte_cible', read_only=True)
    ecriture_numero = serializers.CharField(source='ecriture.numero', read_only=True)

    class Meta:
        model = ConversionDevise
        fields = [
            'id',
            'devise_source',
            'devise_cible',
            'montant_source',
            'montant_cible',
            'taux_change',
            'compte_source',
            'compte_source_detail',
            'compte_cible',
            'compte_cible_detail',
            'ecriture',
            'ecriture_numero',
            'date_conversion',
            'notes',
            'created_at',
        ]
        read_only_fields = fields


class ConversionCreationSerializer(serializers.Serializer):
    """
    Demande de conversion entre deux comptes de trésorerie.
    Sans taux, le dernier taux connu est utilisé.
    """

    compte_source = serializers.PrimaryKeyRelatedField(queryset=CompteOHADA.objects.filter(is_active=True))
    compte_cible = serializers.PrimaryKeyRelatedField(queryset=CompteOHADA.objects.filter(is_active=True))
    montant_source = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=Decimal('0.01'))
    montant_cible = serializers.DecimalField(max_digits=18, decimal_places=2, required=False,
                                             min_value=Decimal('0.01'))
    taux = serializers.DecimalField(max_digits=18, decimal_places=8, required=False,
                                    min_value=Decimal('0.00000001'))
    date_conversion = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        source, cible = attrs['compte_source'], attrs['compte_cible']
        if source.pk == cible.pk:
            raise serializers.ValidationError("Les comptes source et cible doivent être différents")
        for champ, compte in (('compte_source', source), ('compte_cible', cible)):
            if compte.classement.classe != 5:
                raise serializers.ValidationError({champ: "Seuls les comptes de trésorerie peuvent être convertis"})
        return attrs


class CotationSerializer(serializers.Serializer):
    devise_source = serializers.CharField(max_length=3)
    devise_cible = serializers.CharField(max_length=3)
    date = serializers.DateField(required=False)

    def validate_devise_source(self, value):
        return value.upper()

    def validate_devise_cible(self, value):
        return value.upper()
