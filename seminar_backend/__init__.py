"""Backend de réservation de séminaires: tarification, bons de réduction et confirmation des paiements PayPal."""
