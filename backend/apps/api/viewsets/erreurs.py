# apps/api/viewsets/erreurs.py
"""
Traduction des erreurs métier en réponses HTTP 400
"""

import logging

from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response

from apps.accounting.moteur.exceptions import EcritureDesequilibree, ErreurComptable

logger = logging.getLogger(__name__)

ERREURS_METIER = (ErreurComptable, ValidationError)


def reponse_erreur(exc):
    """{'error': message} ; l'écart est joint pour une écriture déséquilibrée"""
    if isinstance(exc, ValidationError):
        message = ' '.join(exc.messages)
    else:
        message = str(exc)

    data = {'error': message}
    if isinstance(exc, EcritureDesequilibree):
        data['ecart'] = str(exc.ecart)

    logger.info("Opération refusée (%s) : %s", type(exc).__name__, message)
    return Response(data, status=status.HTTP_400_BAD_REQUEST)


def utilisateur(request):
    return request.user if request.user.is_authenticated else None
