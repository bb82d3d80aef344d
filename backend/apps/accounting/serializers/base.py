# apps/accounting/serializers/base.py
"""
Serializers de base pour les entités fondamentales OHADA
- CompteOHADA : Plan comptable
- Journal : Journaux comptables
"""

import logging

from rest_framework import serializers

from apps.accounting.models import CompteOHADA, Journal

logger = logging.getLogger(__name__)


class CompteOHADASerializer(serializers.ModelSerializer):
    """
    Serializer pour le plan comptable OHADA

    Fonctionnalités :
    - Validation du code (chiffres, classe 1 à 9)
    - Classe déduite du code
    - Rubrique OHADA calculée (non_classe si hors nomenclature)
    """

    rubrique = serializers.SerializerMethodField()
    compte_complet = serializers.SerializerMethodField()

    class Meta:
        model = CompteOHADA
        fields = [
            'id',
            'code',
            'libelle',
            'classe',
            'type',
            'parent',
            'reconciliable',
            'devise',
            'solde_normal',
            'is_active',
            'rubrique',
            'compte_complet',
            'created_at',
            'updated_at'
        ]
        read_only_fields = ['classe', 'created_at', 'updated_at']

    def get_rubrique(self, obj):
        return obj.classement.rubrique

    def get_compte_complet(self, obj):
        """Code + libellé pour affichage dans les listes"""
        return f"{obj.code} - {obj.libelle}"

    def validate_code(self, value):
        if not value.isdigit():
            raise serializers.ValidationError("Le code doit contenir uniquement des chiffres")

        if value[0] not in '123456789':
            raise serializers.ValidationError("La classe doit être comprise entre 1 et 9")

        return value

    def validate_devise(self, value):
        return (value or '').upper()

    def validate(self, attrs):
        """Cohérence type / classe"""
        code = attrs.get('code') or getattr(self.instance, 'code', '')
        type_compte = attrs.get('type') or getattr(self.instance, 'type', '')
        parent = attrs.get('parent')

        validations_type = {
            '1': ['passif', 'capitaux'],
            '2': ['actif'],
            '3': ['actif'],
            '4': ['actif', 'passif', 'creance', 'dette'],
            '5': ['actif', 'passif'],
            '6': ['charge'],
            '7': ['produit'],
            '8': ['charge', 'produit'],
            '9': ['actif', 'passif'],
        }

        if code and type_compte:
            types_autorises = validations_type.get(code[0], [])
            if type_compte not in types_autorises:
                raise serializers.ValidationError({
                    'type': f"Type '{type_compte}' non autorisé pour la classe {code[0]}. "
                            f"Types autorisés : {', '.join(types_autorises)}"
                })

        if parent and code and not code.startswith(parent.code.rstrip('0') or parent.code):
            raise serializers.ValidationError({
                'parent': f"Le compte {code} ne peut pas dépendre du compte {parent.code}"
            })

        if attrs.get('devise') and code and code[0] != '5':
            raise serializers.ValidationError({
                'devise': "Seuls les comptes de trésorerie peuvent être tenus en devise"
            })

        return attrs


class CompteOHADAMinimalSerializer(serializers.ModelSerializer):
    """Serializer minimal pour les listes déroulantes et références"""

    compte_complet = serializers.SerializerMethodField()

    class Meta:
        model = CompteOHADA
        fields = ['id', 'code', 'libelle', 'compte_complet', 'type', 'classe', 'devise']

    def get_compte_complet(self, obj):
        return f"{obj.code} - {obj.libelle}"


class JournalSerializer(serializers.ModelSerializer):
    """
    Serializer pour les journaux comptables OHADA
    """

    compte_contrepartie_detail = CompteOHADAMinimalSerializer(
        source='compte_contrepartie',
        read_only=True
    )

    type_display = serializers.CharField(source='get_type_display', read_only=True)
    nb_ecritures = serializers.SerializerMethodField()

    class Meta:
        model = Journal
        fields = [
            'id',
            'code',
            'libelle',
            'type',
            'type_display',
            'compte_contrepartie',
            'compte_contrepartie_detail',
            'is_active',
            'nb_ecritures',
            'created_at',
            'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_nb_ecritures(self, obj):
        return obj.ecritures.count()

    def validate_code(self, value):
        value = (value or '').upper()
        if not value.isalnum():
            raise serializers.ValidationError("Le code ne peut contenir que des lettres et des chiffres")
        return value

    def validate(self, attrs):
        type_journal = attrs.get('type', '')
        compte_contrepartie = attrs.get('compte_contrepartie')

        if type_journal in ('BQ', 'CA') and compte_contrepartie:
            rubrique_attendue = 'banque' if type_journal == 'BQ' else 'caisse'
            if compte_contrepartie.classement.rubrique != rubrique_attendue:
                logger.warning(
                    "Journal %s : compte de contrepartie %s hors rubrique %s",
                    type_journal, compte_contrepartie.code, rubrique_attendue
                )

        return attrs


class JournalMinimalSerializer(serializers.ModelSerializer):

    type_display = serializers.CharField(source='get_type_display', read_only=True)

    class Meta:
        model = Journal
        fields = ['id', 'code', 'libelle', 'type', 'type_display']
