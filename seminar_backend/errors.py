"""
Erreurs métier du pipeline de réservation.
Toutes dérivent de BookingError: message lisible (renvoyé tel quel au client) + code court.
Le handler FastAPI (app_setup.exceptions) les convertit en 400 JSON {"detail", "code"}.
"""


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str, code: str = "invalid"):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(BookingError):
    """Défaut de saisie client (participant manquant, champ société absent, référence de session mal formée)."""

    def __init__(self, message: str, code: str = "validation_error"):
        super().__init__(message, code)


class PricingError(BookingError):
    def __init__(self, message: str, code: str = "pricing_error"):
        super().__init__(message, code)


class InvalidPriceError(PricingError):
    """Aucun prix exploitable sur la session ni sur le séminaire (problème de configuration catalogue)."""

    def __init__(self, message: str = "Aucun prix valide pour cette session", code: str = "invalid_price"):
        super().__init__(message, code)


class SessionNotFoundError(BookingError):
    def __init__(self, message: str = "Session introuvable", code: str = "session_not_found"):
        super().__init__(message, code)


class BookingNotFoundError(BookingError):
    status_code = 404

    def __init__(self, message: str = "Réservation introuvable", code: str = "booking_not_found"):
        super().__init__(message, code)


class PaymentVerificationError(BookingError):
    def __init__(self, message: str, code: str = "payment_verification_failed"):
        super().__init__(message, code)


class PaymentProviderError(Exception):
    """Échec d'appel PayPal (réseau, HTTP non-2xx, réponse illisible). Jamais renvoyé tel quel au client."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


