# apps/accounting/serializers/etats.py
"""
Serializers de restitution des états comptables

Les états sont produits par le moteur sous forme de dataclasses ;
ces serializers ne font que les exposer en lecture.
"""

from rest_framework import serializers


def montant(**kwargs):
    return serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True, **kwargs)


class PeriodeSerializer(serializers.Serializer):
    """Paramètres communs : période d'arrêté et devise de restitution"""

    debut = serializers.DateField()
    fin = serializers.DateField()
    devise = serializers.CharField(max_length=3, required=False, allow_blank=True)

    def validate_devise(self, value):
        return value.upper() or None

    def validate(self, attrs):
        if attrs['debut'] > attrs['fin']:
            raise serializers.ValidationError("La date de début doit précéder la date de fin")
        return attrs


class AvertissementSerializer(serializers.Serializer):
    code = serializers.CharField(read_only=True)
    message = serializers.CharField(read_only=True)
    code_compte = serializers.CharField(read_only=True)
    controle = serializers.CharField(read_only=True)
    attendu = montant()
    obtenu = montant()


# --- Balance générale ---

class LigneBalanceSerializer(serializers.Serializer):
    compte_id = serializers.IntegerField(read_only=True)
    code = serializers.CharField(read_only=True)
    libelle = serializers.CharField(read_only=True)
    classe = serializers.IntegerField(read_only=True, allow_null=True)
    rubrique = serializers.CharField(read_only=True)
    debit_initial = montant()
    credit_initial = montant()
    mouvement_debit = montant()
    mouvement_credit = montant()
    debit_final = montant()
    credit_final = montant()
    est_classe = serializers.BooleanField(read_only=True)


class TotauxBalanceSerializer(serializers.Serializer):
    debit_initial = montant()
    credit_initial = montant()
    mouvement_debit = montant()
    mouvement_credit = montant()
    debit_final = montant()
    credit_final = montant()


class BalanceGeneraleSerializer(serializers.Serializer):
    debut = serializers.DateField(read_only=True)
    fin = serializers.DateField(read_only=True)
    lignes = LigneBalanceSerializer(many=True, read_only=True)
    totaux = TotauxBalanceSerializer(read_only=True)
    ecart = montant()
    equilibree = serializers.BooleanField(read_only=True)
    avertissements = AvertissementSerializer(many=True, read_only=True)


# --- Grand livre, journaux, balance des tiers ---

class CompteMoteurSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    code = serializers.CharField(read_only=True)
    libelle = serializers.CharField(read_only=True)


class MouvementGrandLivreSerializer(serializers.Serializer):
    date = serializers.DateField(source='ligne.date', read_only=True)
    numero = serializers.CharField(source='ligne.numero', read_only=True)
    libelle = serializers.CharField(source='ligne.libelle', read_only=True)
    reference = serializers.CharField(source='ligne.reference', read_only=True)
    journal_id = serializers.IntegerField(source='ligne.journal_id', read_only=True)
    debit = montant()
    credit = montant()
    solde = montant()


class CompteGrandLivreSerializer(serializers.Serializer):
    compte = CompteMoteurSerializer(read_only=True)
    solde_initial = montant()
    mouvements = MouvementGrandLivreSerializer(many=True, read_only=True)
    total_debit = montant()
    total_credit = montant()
    solde_final = montant()


class LigneJournalSerializer(serializers.Serializer):
    compte_id = serializers.IntegerField(read_only=True)
    tiers_id = serializers.IntegerField(read_only=True, allow_null=True)
    libelle = serializers.CharField(read_only=True)
    debit = montant()
    credit = montant()
    devise = serializers.CharField(read_only=True, allow_null=True)


class EcritureJournalSerializer(serializers.Serializer):
    ecriture_id = serializers.IntegerField(read_only=True)
    numero = serializers.CharField(read_only=True)
    date = serializers.DateField(read_only=True)
    reference = serializers.CharField(read_only=True)
    lignes = LigneJournalSerializer(many=True, read_only=True)
    total_debit = montant()
    total_credit = montant()


class JournalAuxiliaireSerializer(serializers.Serializer):
    journal_id = serializers.IntegerField(read_only=True)
    ecritures = EcritureJournalSerializer(many=True, read_only=True)
    total_debit = montant()
    total_credit = montant()


class LigneBalanceTiersSerializer(serializers.Serializer):
    cle = serializers.IntegerField(read_only=True)
    code_compte = serializers.CharField(read_only=True)
    nom = serializers.CharField(read_only=True)
    debit = montant()
    credit = montant()
    solde = montant()


class LigneBalanceAgeeSerializer(serializers.Serializer):
    tiers_id = serializers.IntegerField(read_only=True)
    courant = montant()
    j1_30 = montant()
    j31_60 = montant()
    j61_90 = montant()
    plus_90 = montant()
    total = montant()
    nb_factures = serializers.IntegerField(read_only=True)


# --- États financiers ---

class SIGSerializer(serializers.Serializer):
    postes = serializers.DictField(child=serializers.DecimalField(max_digits=20, decimal_places=2), read_only=True)
    chiffre_affaires = montant()
    marge_commerciale = montant()
    valeur_ajoutee = montant()
    excedent_brut_exploitation = montant()
    resultat_exploitation = montant()
    resultat_financier = montant()
    resultat_activites_ordinaires = montant()
    resultat_hao = montant()
    resultat_net = montant()
    total_produits = montant()
    total_charges = montant()


class FormationResultatSerializer(serializers.Serializer):
    chiffre_affaires = montant()
    production_immobilisee_stockee = montant()
    consommations = montant()
    valeur_ajoutee = montant()
    excedent_brut_exploitation = montant()
    resultat_exploitation = montant()
    resultat_financier = montant()
    resultat_hao = montant()
    resultat_net = montant()


class FluxTresorerieSerializer(serializers.Serializer):
    capacite_autofinancement = montant()
    variation_stocks = montant()
    variation_creances = montant()
    variation_dettes = montant()
    flux_operationnels = montant()
    acquisitions_immobilisations = montant()
    investissements_financiers = montant()
    cessions_immobilisations = montant()
    flux_investissement = montant()
    apports_capitaux = montant()
    emprunts = montant()
    remboursements = montant()
    comptes_associes = montant()
    flux_financement = montant()
    flux_total = montant()


class TFTSerializer(serializers.Serializer):
    formation = FormationResultatSerializer(read_only=True)
    flux = FluxTresorerieSerializer(read_only=True)
    tresorerie_ouverture = montant()
    tresorerie_cloture = montant()
    variation_tresorerie = montant()


class LigneBilanSerializer(serializers.Serializer):
    compte_id = serializers.IntegerField(read_only=True)
    code = serializers.CharField(read_only=True)
    libelle = serializers.CharField(read_only=True)
    cote = serializers.CharField(read_only=True)
    poste = serializers.CharField(read_only=True)
    montant = montant()


class BilanSerializer(serializers.Serializer):
    postes = serializers.DictField(child=serializers.DecimalField(max_digits=20, decimal_places=2), read_only=True)
    lignes = LigneBilanSerializer(many=True, read_only=True)
    total_actif = montant()
    total_passif = montant()
    resultat = montant()
    total_passif_resultat = montant()
    ecart_equation = montant()


class EtatsFinanciersSerializer(serializers.Serializer):
    debut = serializers.DateField(read_only=True)
    fin = serializers.DateField(read_only=True)
    sig = SIGSerializer(read_only=True)
    tft = TFTSerializer(read_only=True)
    bilan = BilanSerializer(read_only=True)
    est_coherent = serializers.BooleanField(read_only=True)
    avertissements = AvertissementSerializer(many=True, read_only=True)
